from dataclasses import dataclass, field

DEFAULT_PER_PAGE = 20
MAX_PER_PAGE = 100


@dataclass
class Page:
    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    @property
    def pages(self) -> int:
        return (self.total + self.per_page - 1) // self.per_page if self.per_page else 0


def paginate(queryset, page: int | None, per_page: int | None, order_by: str = "-created_at") -> Page:
    """Slice a Protean queryset into one page, newest first by default."""
    page = max(1, page or 1)
    per_page = min(MAX_PER_PAGE, max(1, per_page or DEFAULT_PER_PAGE))
    result = queryset.order_by(order_by).offset((page - 1) * per_page).limit(per_page).all()
    return Page(items=result.items, total=result.total, page=page, per_page=per_page)

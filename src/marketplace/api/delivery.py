"""FastAPI routes for delivery estimates, options and fee rules."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from marketplace.api.caller import command_caller, current_caller
from marketplace.api.errors import ok
from marketplace.api.schemas import (
    EstimateRequest,
    EstimateResponse,
    OptionResponse,
    OptionsRequest,
    QuoteResponse,
    RuleRequest,
    RuleResponse,
    RuleUpdateRequest,
)
from marketplace.config import CURRENCY
from marketplace.delivery.estimation import delivery_options, estimate_delivery
from marketplace.delivery.fee_rule import DeliveryFeeRule
from marketplace.delivery.rules import CreateDeliveryFeeRule, UpdateDeliveryFeeRule, list_rules
from marketplace.identity.access import Caller

delivery_router = APIRouter(prefix="/delivery", tags=["delivery"])


@delivery_router.post("/estimate")
async def estimate(body: EstimateRequest, caller: Caller = Depends(current_caller)) -> dict:
    items = [item.model_dump() for item in body.items] if body.items is not None else None
    quotes = estimate_delivery(
        caller,
        body.destination_address_id,
        items=items,
        delivery_type=body.delivery_type,
        vehicle_type=body.vehicle_type,
    )
    return ok(
        EstimateResponse(
            quotes=[QuoteResponse.model_validate(quote) for quote in quotes],
            total_fee=sum(quote.fee for quote in quotes),
            currency=CURRENCY,
        )
    )


@delivery_router.post("/options")
async def options(body: OptionsRequest, caller: Caller = Depends(current_caller)) -> dict:
    return ok([OptionResponse.model_validate(option) for option in delivery_options(caller, body.destination_address_id)])


@delivery_router.get("/rules")
async def rules(
    include_inactive: bool = Query(default=False, alias="includeInactive"),
    caller: Caller = Depends(current_caller),
) -> dict:
    return ok([RuleResponse.model_validate(rule) for rule in list_rules(caller, include_inactive=include_inactive)])


@delivery_router.post("/rules", status_code=201)
async def create_rule(body: RuleRequest, caller: Caller = Depends(current_caller)) -> dict:
    command = CreateDeliveryFeeRule(**body.model_dump(exclude_none=True), **command_caller(caller))
    rule_id = current_domain.process(command, asynchronous=False)
    return ok(RuleResponse.model_validate(current_domain.repository_for(DeliveryFeeRule).get(rule_id)))


@delivery_router.patch("/rules/{rule_id}")
async def update_rule(rule_id: str, body: RuleUpdateRequest, caller: Caller = Depends(current_caller)) -> dict:
    command = UpdateDeliveryFeeRule(rule_id=rule_id, **body.model_dump(exclude_none=True), **command_caller(caller))
    current_domain.process(command, asynchronous=False)
    return ok(RuleResponse.model_validate(current_domain.repository_for(DeliveryFeeRule).get(rule_id)))

import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]

# psycopg2 ships a C extension; a cached wheel may target another interpreter
_POSTGRES_DRIVER = "psycopg2"


def _install(session: nox.Session, postgres: bool = False) -> None:
    """Install the marketplace package and its test group into the session."""
    session.run("poetry", "install", "--with", "test", *(["--extras", "postgres"] if postgres else []), external=True)
    if postgres:
        session.run("pip", "install", "--force-reinstall", "--no-cache-dir", _POSTGRES_DRIVER)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Full suite: domain, application, BDD and HTTP tests."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_domain(session: nox.Session) -> None:
    """Fee grid, resolver, schedules and state machines; no repositories involved."""
    _install(session)
    session.run("pytest", "-m", "domain", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_application(session: nox.Session) -> None:
    """Command handlers and Gherkin scenarios against the in-memory provider."""
    _install(session)
    session.run("pytest", "-m", "application", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_api(session: nox.Session) -> None:
    """HTTP envelope, status codes and camelCase payloads through TestClient."""
    _install(session)
    session.run("pytest", "-m", "integration", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def schema(session: nox.Session) -> None:
    """Create the relational schema against DATABASE_URL (PROTEAN_ENV=production)."""
    _install(session, postgres=True)
    session.env["PROTEAN_ENV"] = "production"
    session.run("python", "src/manage.py", "setup-db")

import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session) -> None:
    """Install the project with all test extras into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run(
        "pytest",
        "tests/catalogue/domain/",
        "tests/ordering/domain/",
        "tests/identity/domain/",
        "tests/notifications/domain/",
    )


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_postgres(session: nox.Session) -> None:
    """Run the application and integration tests against PostgreSQL.

    Expects ``STOREFRONT_TEST_DATABASE_URL`` to point at an empty database.
    """
    session.install("-e", ".[test,postgres]")
    session.run("pytest", "-m", "application or integration", *session.posargs)

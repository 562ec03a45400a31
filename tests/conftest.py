import pytest
import structlog

from expectant import DSL, Schema, reset_configuration


@pytest.fixture(autouse=True)
def _clean_global_state():
    # Settings overrides and structlog configuration are process-wide
    reset_configuration()
    yield
    reset_configuration()
    structlog.reset_defaults()


@pytest.fixture()
def schema():
    return Schema("test")


@pytest.fixture()
def owner_class():
    """Plain owner exposing attributes that providers read."""

    class Owner:
        per_page_default = 25

        def __init__(self):
            self.default_name = "Default Name"
            self.fallback_value = "Fallback Value"

    return Owner


@pytest.fixture()
def pagination_class():
    class Pagination(DSL):
        pass

    Pagination.expects("pagination_params")
    Pagination.pagination_param("page", type="int", default=1, fallback=1)
    Pagination.pagination_param("per_page", type="int", default=25, fallback=25)
    Pagination.pagination_param("order", type="string", optional=True, fallback="id")

    @Pagination.pagination_param_rule("page")
    def page_positive(rule):
        if rule.value is not None and rule.value < 1:
            rule.failure("must be positive")

    @Pagination.pagination_param_rule("per_page")
    def per_page_range(rule):
        if rule.value is not None and not 1 <= rule.value <= 100:
            rule.failure("must be between 1-100")

    @Pagination.pagination_param_rule("order")
    def order_column(rule):
        if rule.value is not None and rule.value not in ("id", "created_at"):
            rule.failure("invalid column")

    return Pagination

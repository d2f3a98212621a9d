"""Tests for query-string helpers."""

from apps.web.core.querystring import with_params, without_params


class TestWithoutParams:
    def test_drops_named_params_and_keeps_the_rest(self):
        location = "/spice-route/menu/checkout/?email=a%40b.c&code=xyz&table=4"

        assert without_params(location, "code") == (
            "/spice-route/menu/checkout/?email=a%40b.c&table=4"
        )

    def test_last_param_leaves_bare_path(self):
        assert without_params("/spice-route/menu/checkout/?code=xyz", "code") == (
            "/spice-route/menu/checkout/"
        )

    def test_fragment_survives(self):
        assert without_params("/menu/?email=a%40b.c#cart", "email") == "/menu/#cart"

    def test_absent_param_is_noop(self):
        assert without_params("/menu/?x=1", "email") == "/menu/?x=1"


class TestWithParams:
    def test_adds_param_to_absolute_url(self):
        url = with_params("https://order.test/spice-route/menu/checkout/", email="a@b.c")

        assert url == "https://order.test/spice-route/menu/checkout/?email=a%40b.c"

    def test_replaces_existing_value(self):
        assert with_params("/payment/success/?order_id=old", order_id="new") == (
            "/payment/success/?order_id=new"
        )

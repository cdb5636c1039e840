import pytest

from codegrant.models.params import Multi, ParamValue, QueryParams, Single, multi, single


class TestFromPairs:
    def test_repeated_key_collapses_to_multi_in_order(self):
        # Act
        params = QueryParams.from_pairs([("scope", "a"), ("scope", "b")])

        # Assert
        assert params.get("scope") == Multi(["a", "b"])

    def test_key_seen_once_is_single(self):
        params = QueryParams.from_pairs([("client_id", "abc"), ("scope", "a")])

        assert params.get("client_id") == Single("abc")
        assert params.get("scope") == Single("a")

    def test_three_values_keep_input_order(self):
        params = QueryParams.from_pairs([("k", "3"), ("x", "y"), ("k", "1"), ("k", "2")])

        assert multi(params.get("k")) == ["3", "1", "2"]

    def test_empty_input_gives_empty_mapping(self):
        params = QueryParams.from_pairs([])

        assert params.is_empty()
        assert len(params) == 0
        assert params.get("") is None

    def test_missing_key_is_none(self):
        params = QueryParams.from_pairs([("a", "1")])

        assert params.get("b") is None
        assert "b" not in params


class TestAccessors:
    def test_single_only_matches_single_variant(self):
        assert single(Single("x")) == "x"
        assert single(Multi(["x", "y"])) is None
        assert single(None) is None

    def test_multi_only_matches_multi_variant(self):
        assert multi(Multi(["x", "y"])) == ["x", "y"]
        assert multi(Single("x")) is None
        assert multi(None) is None

    def test_variant_predicates(self):
        assert Single("x").is_single()
        assert not Single("x").is_multi()
        assert Multi(["x", "y"]).is_multi()

    def test_base_variant_cannot_be_built(self):
        with pytest.raises(TypeError):
            ParamValue()

    def test_values_are_hashable(self):
        seen = {Single("x"), Multi(["x", "y"]), Multi(("x", "y"))}

        assert len(seen) == 2
        assert Multi(["x", "y"]).items == ("x", "y")


class TestParsing:
    def test_from_url_decodes_query(self):
        params = QueryParams.from_url(
            "https://example.net/auth?redirect_uri=https%3A%2F%2Flocalhost%2Fcb"
            "&scope=a+b&state=xyz"
        )

        assert params.single("redirect_uri") == "https://localhost/cb"
        assert params.single("scope") == "a b"
        assert params.single("state") == "xyz"

    def test_url_without_query_is_empty(self):
        assert QueryParams.from_url("https://example.net/auth").is_empty()

    def test_blank_value_is_kept(self):
        params = QueryParams.from_query("code=&state=s")

        assert params.get("code") == Single("")

    def test_repeated_url_param_is_multi(self):
        params = QueryParams.from_url(
            "https://example.net/cb?redirect_uri=a&redirect_uri=b"
        )

        assert params.single("redirect_uri") is None
        assert params.get("redirect_uri") == Multi(["a", "b"])


class TestIteration:
    def test_iteration_flattens_multi_into_repeated_pairs(self):
        pairs = [("scope", "a"), ("state", "s"), ("scope", "b")]

        params = QueryParams.from_pairs(pairs)

        assert list(params) == [("scope", "a"), ("scope", "b"), ("state", "s")]

    def test_flattened_pairs_rebuild_equal_params(self):
        params = QueryParams.from_pairs([("scope", "a"), ("scope", "b"), ("x", "1")])

        assert QueryParams.from_pairs(list(params)) == params

    def test_to_query_reencodes(self):
        params = QueryParams.from_pairs([("scope", "a b"), ("scope", "c")])

        assert params.to_query() == "scope=a+b&scope=c"

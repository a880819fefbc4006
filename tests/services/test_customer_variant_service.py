"""
Unit tests for CustomerVariantService.
"""

import pytest

from variantsite.core.errors import ContentFetchError
from variantsite.core.models import CustomerVariant
from variantsite.services.customer_variant_service import (
    DEFAULT_VARIANT_QUERY,
    LIST_VARIANTS_QUERY,
    USAGE_DOCUMENTS_QUERY,
    VARIANT_BY_ID_QUERY,
    CustomerVariantService,
)


def _by_id(*docs):
    index = {doc["_id"]: doc for doc in docs}
    return lambda query, params: index.get(params["id"])


class TestListVariants:

    @pytest.mark.asyncio
    async def test_sorted_by_name(self, fake_client, cache, disney_doc, google_doc):
        client = fake_client({LIST_VARIANTS_QUERY: [google_doc, disney_doc]})
        service = CustomerVariantService(client=client, cache=cache)

        variants = await service.list_variants()

        assert [v.name for v in variants] == ["Disney", "Google"]

    @pytest.mark.asyncio
    async def test_empty_registry(self, fake_client, cache):
        service = CustomerVariantService(client=fake_client({LIST_VARIANTS_QUERY: None}), cache=cache)
        assert await service.list_variants() == []

    @pytest.mark.asyncio
    async def test_malformed_variants_skipped(self, fake_client, cache, disney_doc):
        client = fake_client({LIST_VARIANTS_QUERY: [disney_doc, {"_id": "broken"}, "junk"]})
        service = CustomerVariantService(client=client, cache=cache)
        assert [v.id for v in await service.list_variants()] == ["variant-disney"]

    @pytest.mark.asyncio
    async def test_half_edited_row_keeps_variant(self, fake_client, cache, disney_doc):
        disney_doc["replacements"].append({"_key": "r3", "originalTerm": "manager", "replacementTerm": None})
        client = fake_client({
            LIST_VARIANTS_QUERY: [disney_doc],
            VARIANT_BY_ID_QUERY: _by_id(disney_doc),
        })
        service = CustomerVariantService(client=client, cache=cache)

        assert [v.id for v in await service.list_variants()] == ["variant-disney"]
        variant = await service.get_variant("variant-disney")
        assert variant.find_replacement("employee").replacement_term == "cast member"
        assert variant.find_replacement("manager") is None

    @pytest.mark.asyncio
    async def test_cached_across_instances(self, fake_client, cache, disney_doc):
        client = fake_client({LIST_VARIANTS_QUERY: [disney_doc]})

        await CustomerVariantService(client=client, cache=cache).list_variants()
        await CustomerVariantService(client=client, cache=cache).list_variants()

        assert client.fetch.await_count == 1

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, fake_client, cache):
        client = fake_client({LIST_VARIANTS_QUERY: ContentFetchError("down")})
        service = CustomerVariantService(client=client, cache=cache)
        with pytest.raises(ContentFetchError):
            await service.list_variants()


class TestDefaultAndResolve:

    @pytest.mark.asyncio
    async def test_default_variant(self, fake_client, cache, google_doc):
        service = CustomerVariantService(client=fake_client({DEFAULT_VARIANT_QUERY: google_doc}), cache=cache)
        default = await service.get_default_variant()
        assert default.id == "variant-google"

    @pytest.mark.asyncio
    async def test_no_default(self, fake_client, cache):
        service = CustomerVariantService(client=fake_client({DEFAULT_VARIANT_QUERY: None}), cache=cache)
        assert await service.get_default_variant() is None
        assert await service.resolve_variant(None) is None

    @pytest.mark.asyncio
    async def test_explicit_id(self, fake_client, cache, disney_doc, google_doc):
        client = fake_client({
            VARIANT_BY_ID_QUERY: _by_id(disney_doc, google_doc),
            DEFAULT_VARIANT_QUERY: google_doc,
        })
        service = CustomerVariantService(client=client, cache=cache)

        variant = await service.resolve_variant("variant-disney")

        assert variant.name == "Disney"

    @pytest.mark.asyncio
    async def test_unknown_id_does_not_fall_back_to_default(self, fake_client, cache, google_doc):
        client = fake_client({
            VARIANT_BY_ID_QUERY: _by_id(google_doc),
            DEFAULT_VARIANT_QUERY: google_doc,
        })
        service = CustomerVariantService(client=client, cache=cache)

        assert await service.resolve_variant("variant-unknown") is None

    @pytest.mark.asyncio
    async def test_no_id_uses_default(self, fake_client, cache, google_doc):
        service = CustomerVariantService(client=fake_client({DEFAULT_VARIANT_QUERY: google_doc}), cache=cache)
        assert (await service.resolve_variant()).id == "variant-google"

    @pytest.mark.asyncio
    async def test_get_variant_empty_id(self, fake_client, cache):
        client = fake_client({})
        service = CustomerVariantService(client=client, cache=cache)
        assert await service.get_variant("") is None
        client.fetch.assert_not_awaited()


class TestFindTermUsages:

    @pytest.mark.asyncio
    async def test_collects_terms_per_document(self, fake_client, cache, disney_doc, block):
        documents = [
            {
                "_id": "post-1",
                "_type": "post",
                "title": "Welcome",
                "content": [
                    block("customer", original_term="customer", key="b1"),
                    block("employee", original_term="employee", key="b2"),
                    block("customer", original_term="customer", key="b3"),
                ],
            },
            {
                "_id": "page-1",
                "_type": "page",
                "title": None,
                "content": {
                    "_type": "experimentBlockContent",
                    "default": [block("employee", original_term="employee")],
                    "variants": [],
                },
            },
            {"_id": "post-2", "_type": "post", "title": "Plain", "content": [block("Nothing here")]},
            {"_id": "post-3", "_type": "post", "title": "Empty", "content": None},
        ]
        service = CustomerVariantService(client=fake_client({USAGE_DOCUMENTS_QUERY: documents}), cache=cache)

        usages = await service.find_term_usages(CustomerVariant.model_validate(disney_doc))

        assert [u.document_id for u in usages] == ["post-1", "page-1"]
        assert usages[0].original_terms == ["customer", "employee"]
        assert usages[1].title == "Untitled"
        assert usages[1].document_type == "page"

    @pytest.mark.asyncio
    async def test_variant_without_terms(self, fake_client, cache):
        client = fake_client({})
        service = CustomerVariantService(client=client, cache=cache)

        usages = await service.find_term_usages(CustomerVariant.model_validate({"_id": "v", "name": "Nike"}))

        assert usages == []
        client.fetch.assert_not_awaited()

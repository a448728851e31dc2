"""Tests for FMailerClient against a fake API."""

import json
import logging

import httpx
import pytest

from fmailer_provider.client import DEFAULT_TIMEOUT, FMailerClient
from fmailer_provider.core.exceptions import (
    FMailerDecodingError,
    FMailerTimeoutError,
    FMailerTransportError,
    UnexpectedStatusError,
)
from fmailer_provider.models import DomainTemplate, DomainTemplateLang

TEMPLATES = "/api/domains/templates/"
UUID = "3f1c9a52-7d1e-4b8e-9a55-0c2b8f6e1a01"


def _template(**overrides) -> DomainTemplate:
    fields = {"name": "Welcome", "slug": "welcome-1", "domain": 5}
    fields.update(overrides)
    return DomainTemplate(**fields)


# ---------------------------------------------------------------------------
# Operations: method, path and success status
# ---------------------------------------------------------------------------


class TestCreate:
    def test_posts_base_fields_and_decodes_response(self, api, make_template):
        api.with_response("POST", TEMPLATES, 200, json=make_template())
        client = api.build_client()

        created = client.create_domain_template(_template())

        assert created.id == 42
        assert created.uuid == UUID
        (request,) = api.requests
        assert request.method == "POST"
        assert request.path == TEMPLATES
        assert request.json == {"name": "Welcome", "slug": "welcome-1", "allow_copy": True, "editable": True, "domain": 5}

    def test_201_is_unexpected(self, api, make_template):
        api.with_response("POST", TEMPLATES, 201, json=make_template())

        with pytest.raises(UnexpectedStatusError) as exc_info:
            api.build_client().create_domain_template(_template())

        assert exc_info.value.status_code == 201
        assert exc_info.value.expected == 200
        assert str(exc_info.value) == "unexpected status code: 201"

    def test_validation_error_keeps_body(self, api):
        api.with_response("POST", TEMPLATES, 400, json={"slug": ["template with this slug already exists."]})

        with pytest.raises(UnexpectedStatusError) as exc_info:
            api.build_client().create_domain_template(_template())

        assert exc_info.value.error_category == "client_error"
        assert "already exists" in exc_info.value.body


class TestGet:
    def test_gets_by_uuid(self, api, make_template, make_lang, item_path):
        api.with_response("GET", item_path(), 200, json=make_template(langs=[make_lang()]))

        template = api.build_client().get_domain_template(UUID)

        assert template.slug == "welcome-1"
        assert template.langs == [
            DomainTemplateLang.model_validate(make_lang()),
        ]
        assert api.requests[0].path == item_path()

    def test_not_found(self, api):
        with pytest.raises(UnexpectedStatusError) as exc_info:
            api.build_client().get_domain_template("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.error_category == "not_found"
        assert exc_info.value.provider_message == "Not found."

    def test_uuid_is_path_escaped(self, api):
        with pytest.raises(UnexpectedStatusError):
            api.build_client().get_domain_template("a/b")

        assert api.requests[0].path == f"{TEMPLATES}a%2Fb/"


class TestUpdate:
    def test_puts_full_representation(self, api, make_template, item_path):
        api.with_response("PUT", item_path(), 200, json=make_template(name="Renamed"))
        lang = DomainTemplateLang(lang="en", subject="Hi", body="Hello", default=True, template=42)

        updated = api.build_client().update_domain_template(UUID, _template(name="Renamed", langs=[lang]))

        assert updated.name == "Renamed"
        body = api.requests[0].json
        assert body["name"] == "Renamed"
        assert body["langs"] == [{"subject": "Hi", "body": "Hello", "lang": "en", "default": True, "template": 42}]

    def test_server_error(self, api, item_path):
        api.with_response("PUT", item_path(), 503, text="upstream unavailable")

        with pytest.raises(UnexpectedStatusError) as exc_info:
            api.build_client().update_domain_template(UUID, _template())

        assert exc_info.value.error_category == "server_error"
        # body only goes into the message for delete
        assert "upstream" not in str(exc_info.value)


class TestDelete:
    def test_204_succeeds(self, api, item_path):
        api.with_response("DELETE", item_path(), 204)

        assert api.build_client().delete_domain_template(UUID) is None
        assert api.requests[0].method == "DELETE"

    def test_200_is_an_error_quoting_the_body(self, api, item_path):
        api.with_response("DELETE", item_path(), 200, text="template is in use")

        with pytest.raises(UnexpectedStatusError) as exc_info:
            api.build_client().delete_domain_template(UUID)

        assert exc_info.value.status_code == 200
        assert "template is in use" in str(exc_info.value)


class TestList:
    def test_query_parameters_in_fixed_order(self, api, make_template):
        path = f"{TEMPLATES}?domain=5&search=foo&page=2&ordering=name"
        api.with_response("GET", path, 200, json={"count": 1, "results": [make_template()]})

        page = api.build_client().list_domain_templates(domain=5, search="foo", page=2, ordering="name")

        assert page.count == 1
        assert api.requests[0].path == path

    def test_no_filters_means_no_query(self, api):
        api.with_response("GET", TEMPLATES, 200, json={"count": 0, "next": None, "previous": None, "results": []})

        page = api.build_client().list_domain_templates()

        assert page.results == []
        assert api.requests[0].path == TEMPLATES

    def test_filters_are_independent(self, api):
        path = f"{TEMPLATES}?search=foo&ordering=-name"
        api.with_response("GET", path, 200, json={"count": 0, "results": []})

        api.build_client().list_domain_templates(search="foo", ordering="-name")

        assert api.requests[0].path == path


class TestDuplicate:
    def test_posts_name_and_slug(self, api, item_path, make_template):
        api.with_response("POST", f"{item_path()}duplicate/", 200, json=make_template(uuid="copy"))

        api.build_client().duplicate_domain_template(UUID, "Welcome copy", "welcome-copy")

        request = api.requests[0]
        assert request.path == f"{item_path()}duplicate/"
        assert request.json == {"name": "Welcome copy", "slug": "welcome-copy"}

    def test_non_200_is_an_error(self, api, item_path):
        api.with_response("POST", f"{item_path()}duplicate/", 201, json={})

        with pytest.raises(UnexpectedStatusError):
            api.build_client().duplicate_domain_template(UUID, "n", "s")


# ---------------------------------------------------------------------------
# Request plumbing
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_token_is_sent_verbatim(self, api, make_template, item_path):
        api.with_response("GET", item_path(), 200, json=make_template())

        api.build_client(token="Token abc123").get_domain_template(UUID)

        headers = api.requests[0].headers
        assert headers["authorization"] == "Token abc123"
        assert "content-type" not in headers

    def test_json_content_type_on_body_requests(self, api, make_template):
        api.with_response("POST", TEMPLATES, 200, json=make_template())

        api.build_client().create_domain_template(_template())

        assert api.requests[0].headers["content-type"] == "application/json"

    def test_endpoint_trailing_slash_is_ignored(self, api, make_template, item_path):
        api.with_response("GET", item_path(), 200, json=make_template())

        client = api.build_client(endpoint="https://api.fmailer.test/")
        client.get_domain_template(UUID)

        assert client.endpoint == "https://api.fmailer.test"
        assert api.requests[0].path == item_path()


class TestFailures:
    def test_timeout(self, api, item_path):
        api.with_error("GET", item_path(), httpx.ReadTimeout("timed out"))

        with pytest.raises(FMailerTimeoutError) as exc_info:
            api.build_client().get_domain_template(UUID)

        assert exc_info.value.error_code == "TIMEOUT"
        assert exc_info.value.timeout == DEFAULT_TIMEOUT

    def test_connection_failure(self, api, item_path):
        api.with_error("GET", item_path(), httpx.ConnectError("connection refused"))

        with pytest.raises(FMailerTransportError) as exc_info:
            api.build_client().get_domain_template(UUID)

        assert "connection refused" in str(exc_info.value)
        assert not isinstance(exc_info.value, FMailerTimeoutError)

    def test_failures_are_not_retried(self, api, item_path):
        api.with_response("GET", item_path(), 500, text="boom")

        with pytest.raises(UnexpectedStatusError):
            api.build_client().get_domain_template(UUID)

        assert len(api.requests) == 1

    def test_invalid_json(self, api, item_path):
        api.with_response("GET", item_path(), 200, text="<html>oops</html>")

        with pytest.raises(FMailerDecodingError) as exc_info:
            api.build_client().get_domain_template(UUID)

        assert exc_info.value.status_code == 200

    def test_wrong_shape(self, api, item_path):
        api.with_response("GET", item_path(), 200, json={"uuid": UUID})

        with pytest.raises(FMailerDecodingError):
            api.build_client().get_domain_template(UUID)


class TestLogging:
    def test_request_log_hashes_the_token(self, api, make_template, item_path, caplog):
        api.with_response("GET", item_path(), 200, json=make_template())

        with caplog.at_level(logging.INFO, logger="fmailer_provider.client"):
            api.build_client(token="s3cr3t").get_domain_template(UUID)

        records = [r for r in caplog.records if r.getMessage() == "fmailer.http.request"]
        assert len(records) == 1
        assert records[0].method == "GET"
        assert len(records[0].auth_hash) == 10
        assert "s3cr3t" not in json.dumps(records[0].__dict__, default=str)


class TestLifetime:
    def test_owned_http_client_is_closed(self):
        client = FMailerClient("https://api.fmailer.test", "t")
        with client:
            pass
        assert client._http.is_closed

    def test_injected_http_client_is_left_open(self):
        http = httpx.Client()
        with FMailerClient("https://api.fmailer.test", "t", http_client=http):
            pass
        assert not http.is_closed
        http.close()


def test_unexpected_status_is_logged_as_error_event(api, caplog):
    with caplog.at_level(logging.WARNING, logger="fmailer_provider.client"):
        with pytest.raises(UnexpectedStatusError):
            api.build_client().get_domain_template(UUID)

    (record,) = [r for r in caplog.records if r.getMessage() == "fmailer.http.error"]
    assert record.status == 404
    assert record.expected == 200

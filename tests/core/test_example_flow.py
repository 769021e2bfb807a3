"""End-to-end tests for the example walkthrough against a stub API."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from core.config import ApiConfig, CredentialsConfig
from core.services.example_flow import FlowHooks, run_example_flow

SLIDE = {
    "savedIdentifier": "S20-1 A1",
    "alternateIdentifier": "ALT-1",
    "barcodeContent": "1>2U>3",
    "caseBaseId": 7,
}


class StubApi:
    """Token endpoint plus REST/OData resources, recording every request."""

    def __init__(self, *, token_status=200, slide_status=200, slide_body=None, slide=None):
        self.token_status = token_status
        self.slide_status = slide_status
        self.slide_body = slide_body
        self.slide = SLIDE if slide is None else slide
        self.token_bodies: list[str] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "auth.example.com":
            return self._token(request)
        return self._resource(request)

    def _token(self, request: httpx.Request) -> httpx.Response:
        body = request.content.decode()
        self.token_bodies.append(body)
        if self.token_status != 200:
            return httpx.Response(self.token_status, json={"error": "invalid_client"})
        form = parse_qs(body)
        payload = {"access_token": "abc", "token_type": "Bearer", "expires_in": 3600}
        if "offline_access" in form.get("scope", [""])[0]:
            payload["refresh_token"] = "r1"
        return httpx.Response(200, json=payload)

    def _resource(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/v1/Slide" and request.method == "GET":
            if self.slide_status != 200:
                return httpx.Response(self.slide_status)
            if self.slide_body is not None:
                return httpx.Response(200, content=self.slide_body)
            return httpx.Response(200, json={"value": [self.slide]})
        if path == "/api/v1/Case(7)":
            return httpx.Response(200, json={"id": 7, "studyId": 3})
        if path == "/api/v1/Study(3)":
            return httpx.Response(200, json={"id": 3, "name": "Study 3"})
        if path == "/api/v1/StainTest":
            return httpx.Response(200, json={"value": [{"id": 101}]})
        if path == "/api/v1/Slide/FindByBarcode":
            barcodes = json.loads(request.content)["barcodes"]
            return httpx.Response(
                200,
                json={"value": [{"savedIdentifier": f"S-{b}", "barcodeContent": b} for b in barcodes[:2]]},
            )
        return httpx.Response(404)

    def find(self, path: str) -> httpx.Request:
        return next(r for r in self.requests if r.url.path == path)


class TestTokenSequence:
    @pytest.mark.asyncio
    async def test_refresh_token_is_threaded_to_next_request(self, api_config, settings):
        api = StubApi()

        await run_example_flow(api_config, settings, transport=httpx.MockTransport(api))

        assert len(api.token_bodies) == 4
        assert "grant_type=client_credentials" in api.token_bodies[0]
        assert "grant_type=password" in api.token_bodies[1]
        assert "offline_access" in api.token_bodies[2]
        assert "grant_type=refresh_token&refresh_token=r1" in api.token_bodies[3]

    @pytest.mark.asyncio
    async def test_step_order(self, api_config, settings):
        result = await run_example_flow(api_config, settings, transport=httpx.MockTransport(StubApi()))

        assert [step.name for step in result.steps] == [
            "client_credentials",
            "password",
            "password_offline",
            "refresh_token",
            "find_slide",
            "case",
            "study",
            "stain_tests",
            "find_by_barcode",
        ]
        assert result.failed == []

    @pytest.mark.asyncio
    async def test_without_resource_owner_password_grants_are_skipped(self, settings):
        config = ApiConfig(
            server_url="https://api.example.com/",
            authentication_url="https://auth.example.com/connect/token",
            credentials=CredentialsConfig(client_id="client-1", client_secret="secret-1"),
        )
        api = StubApi()

        result = await run_example_flow(config, settings, transport=httpx.MockTransport(api))

        assert len(api.token_bodies) == 1
        assert result.step("password").skipped
        assert result.step("refresh_token").skipped
        assert result.step("stain_tests").ok


class TestDataReads:
    @pytest.mark.asyncio
    async def test_reads_use_client_credentials_token(self, api_config, settings):
        api = StubApi()

        result = await run_example_flow(api_config, settings, transport=httpx.MockTransport(api))

        assert api.find("/api/v1/Case(7)").headers["Authorization"] == "Bearer abc"
        assert api.find("/api/v1/StainTest").url.params["$skip"] == "100"
        assert api.find("/api/v1/Slide").url.params["$filter"] == "barcodeContent eq '1>2U>3'"
        assert result.slide is not None
        assert result.slide.primary_identifier == "S20-1 A1"
        assert [s.primary_identifier for s in result.slides] == ["S-2*2U*1*1", "S-2*2U*2*1"]

    @pytest.mark.asyncio
    async def test_lookup_failure_does_not_abort_remaining_steps(self, api_config, settings):
        api = StubApi(slide_status=500)

        result = await run_example_flow(api_config, settings, transport=httpx.MockTransport(api))

        find_slide = result.step("find_slide")
        assert not find_slide.ok
        assert "500" in find_slide.error
        assert result.step("case") is None
        assert result.step("stain_tests").ok
        assert result.step("find_by_barcode").ok

    @pytest.mark.asyncio
    async def test_undecodable_lookup_body_does_not_abort_remaining_steps(self, api_config, settings):
        api = StubApi(slide_body=b'{"value": ["\xff\xfe"]}')

        result = await run_example_flow(api_config, settings, transport=httpx.MockTransport(api))

        find_slide = result.step("find_slide")
        assert not find_slide.ok
        assert "invalid JSON" in find_slide.error
        assert result.step("stain_tests").ok
        assert result.step("find_by_barcode").ok

    @pytest.mark.asyncio
    async def test_boolean_case_id_is_not_requested(self, api_config, settings):
        api = StubApi(slide={**SLIDE, "caseBaseId": True})

        result = await run_example_flow(api_config, settings, transport=httpx.MockTransport(api))

        assert result.step("case") is None
        assert not any("Case" in r.url.path for r in api.requests)
        assert result.slide.primary_identifier == "S20-1 A1"

    @pytest.mark.asyncio
    async def test_custom_lookup(self, api_config, settings):
        class StubLookup:
            def __init__(self, token):
                self.token = token
                self.calls = []

            async def find(self, entity_set, filter_expr):
                self.calls.append(("find", entity_set, filter_expr))
                return []

            async def invoke(self, entity_set, action, params):
                self.calls.append(("invoke", entity_set, action))
                return [{"savedIdentifier": "X"}]

        lookups = []

        def factory(token):
            lookups.append(StubLookup(token))
            return lookups[-1]

        result = await run_example_flow(
            api_config,
            settings,
            transport=httpx.MockTransport(StubApi()),
            lookup_factory=factory,
        )

        assert lookups[0].token == "abc"
        assert lookups[0].calls[1] == ("invoke", "Slide", "FindByBarcode")
        assert result.slide is None
        assert [s.primary_identifier for s in result.slides] == ["X"]


class TestFailures:
    @pytest.mark.asyncio
    async def test_token_endpoint_errors_are_reported_not_raised(self, api_config, settings):
        api = StubApi(token_status=401)

        result = await run_example_flow(api_config, settings, transport=httpx.MockTransport(api))

        failed = [step.name for step in result.failed]
        assert failed == ["client_credentials", "password", "password_offline"]
        assert all("401" in step.error for step in result.failed)
        assert result.step("refresh_token").skipped
        assert result.step("data").skipped
        assert len(api.token_bodies) == 3

    @pytest.mark.asyncio
    async def test_hooks_receive_every_step(self, api_config, settings):
        started: list[str] = []
        done: list[str] = []
        tables: list[int] = []
        hooks = FlowHooks(
            step_start=lambda name, _description: started.append(name),
            step_done=lambda step: done.append(step.name),
            slides_found=lambda slides: tables.append(len(slides)),
        )

        await run_example_flow(api_config, settings, hooks=hooks, transport=httpx.MockTransport(StubApi()))

        assert started == done
        assert tables == [2]

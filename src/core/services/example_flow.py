"""Example API walkthrough.

Runs the token grants and the authenticated reads in a fixed, sequential
order. Every step is independent: a failure is recorded and logged, and the
remaining steps that do not depend on it still run. Printing is left to the
caller through `FlowHooks`, which keeps this module usable from tests.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx

from adapters.authenticated_reader import AuthenticatedReader
from adapters.odata_client import (
    PrimaODataClient,
    find_slide_by_barcode_content,
    translate_barcodes_to_identifiers,
)
from adapters.token_exchanger import TokenExchanger
from core.config import ApiConfig, AppSettings
from core.domain.models import TrackableIdentifier
from core.errors import PrimaClientError
from core.interfaces.record_lookup import RecordLookup
from core.token_parsing import extract_access_token, extract_refresh_token

logger = logging.getLogger(__name__)

LookupFactory = Callable[[str], RecordLookup]


@dataclass
class StepResult:
    """Outcome of one step of the walkthrough."""

    name: str
    description: str
    ok: bool
    body: str | None = None
    error: str | None = None
    skipped: bool = False


@dataclass
class FlowHooks:
    """Optional callbacks for UI layers."""

    step_start: Callable[[str, str], None] | None = None
    step_done: Callable[[StepResult], None] | None = None
    slides_found: Callable[[list[TrackableIdentifier]], None] | None = None


@dataclass
class FlowResult:
    steps: list[StepResult] = field(default_factory=list)
    slide: TrackableIdentifier | None = None
    slides: list[TrackableIdentifier] = field(default_factory=list)

    def step(self, name: str) -> StepResult | None:
        for item in self.steps:
            if item.name == name:
                return item
        return None

    @property
    def failed(self) -> list[StepResult]:
        return [item for item in self.steps if not item.ok and not item.skipped]


def _json_field(raw: str | None, key: str) -> Any:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Response is not valid JSON; cannot read '%s'.", key)
        return None
    if not isinstance(data, dict):
        return None
    return data.get(key)


def _is_record_id(value: Any) -> bool:
    # bool is an int subclass; `true` is not a key.
    return isinstance(value, int) and not isinstance(value, bool)


class ExampleFlow:
    """Sequential walkthrough of the token grants and data reads."""

    def __init__(
        self,
        api_config: ApiConfig,
        settings: AppSettings | None = None,
        *,
        hooks: FlowHooks | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        lookup_factory: LookupFactory | None = None,
    ) -> None:
        self._config = api_config
        self._settings = settings or AppSettings()
        self._hooks = hooks or FlowHooks()
        self._transport = transport
        self._lookup_factory = lookup_factory or self._default_lookup
        self._exchanger = TokenExchanger(
            api_config.authentication_url,
            self._settings,
            transport=transport,
        )
        self._result = FlowResult()

    def _default_lookup(self, access_token: str) -> RecordLookup:
        return PrimaODataClient(
            self._config.server_url,
            access_token,
            self._settings,
            transport=self._transport,
        )

    def _record(self, step: StepResult) -> StepResult:
        self._result.steps.append(step)
        if self._hooks.step_done:
            self._hooks.step_done(step)
        return step

    def _skip(self, name: str, description: str, reason: str) -> None:
        logger.info("Skipping %s: %s", name, reason)
        self._record(StepResult(name=name, description=description, ok=False, error=reason, skipped=True))

    async def _run_step(
        self,
        name: str,
        description: str,
        call: Callable[[], Awaitable[str]],
    ) -> str | None:
        if self._hooks.step_start:
            self._hooks.step_start(name, description)
        try:
            body = await call()
        except PrimaClientError as exc:
            logger.error("%s failed: %s", name, exc)
            self._record(StepResult(name=name, description=description, ok=False, error=str(exc)))
            return None
        self._record(StepResult(name=name, description=description, ok=True, body=body))
        return body

    async def run(self) -> FlowResult:
        credentials = self._config.credentials

        client_credentials_body = await self._run_step(
            "client_credentials",
            f"Using client credentials (Client Id: {credentials.client_id}) to retrieve an access token",
            lambda: self._exchanger.client_credentials(credentials),
        )

        owner = f"Client Id: {credentials.client_id}, User: {credentials.username}"
        if credentials.username and credentials.password:
            await self._run_step(
                "password",
                f"Using client credentials and resource owner password ({owner}) to retrieve an access token",
                lambda: self._exchanger.resource_owner_password(credentials),
            )
            offline_body = await self._run_step(
                "password_offline",
                f"Using client credentials and resource owner password ({owner}) "
                "to retrieve an access token AND refresh token",
                lambda: self._exchanger.resource_owner_password(credentials, request_refresh_token=True),
            )
        else:
            self._skip("password", "Resource owner password grant", "no username/password configured")
            self._skip("password_offline", "Resource owner password grant with offline access", "no username/password configured")
            offline_body = None

        refresh_token = extract_refresh_token(offline_body) if offline_body else None
        if refresh_token:
            await self._run_step(
                "refresh_token",
                "Using the refresh token to retrieve an access token and refresh token",
                lambda: self._exchanger.refresh(credentials, refresh_token),
            )
        else:
            self._skip("refresh_token", "Refresh token grant", "no refresh token available")

        access_token, token_type = extract_access_token(client_credentials_body)
        if not access_token or not token_type:
            self._skip("data", "Authenticated data reads", "no access token from the client credentials grant")
            return self._result

        await self._read_data(access_token, token_type)
        return self._result

    async def _read_data(self, access_token: str, token_type: str) -> None:
        settings = self._settings
        reader = AuthenticatedReader(
            self._config.server_url,
            token_type,
            access_token,
            settings,
            transport=self._transport,
        )
        lookup = self._lookup_factory(access_token)

        slide_record: dict[str, Any] | None = None

        async def _find_slide() -> str:
            nonlocal slide_record
            slide_record = await find_slide_by_barcode_content(lookup, settings.example_barcode)
            return json.dumps([slide_record] if slide_record is not None else [])

        await self._run_step(
            "find_slide",
            f"Making a GET request for slide information for slides with barcode content {settings.example_barcode}",
            _find_slide,
        )
        if slide_record is not None:
            self._result.slide = TrackableIdentifier.from_record(slide_record)

        case_id = slide_record.get("caseBaseId") if slide_record else None
        if _is_record_id(case_id):
            case_body = await self._run_step(
                "case",
                f"Making a GET request for case information for a case with id {case_id} "
                f"(Request URL: {reader.case_url(case_id)})",
                lambda: reader.get_case_by_id(case_id),
            )
            study_id = _json_field(case_body, "studyId")
            if _is_record_id(study_id):
                await self._run_step(
                    "study",
                    f"Making a GET request for study information for a study with id {study_id} "
                    f"(Request URL: {reader.study_url(study_id)})",
                    lambda: reader.get_study_by_id(study_id),
                )

        skip = settings.stain_test_skip
        await self._run_step(
            "stain_tests",
            f"Making a GET request for page stain tests skipping the first {skip} items "
            f"(Request URL: {reader.stain_tests_url(skip)})",
            lambda: reader.get_paged_stain_tests(skip),
        )

        async def _translate() -> str:
            slides = await translate_barcodes_to_identifiers(lookup, settings.example_barcodes)
            self._result.slides = slides
            return json.dumps([slide.model_dump() for slide in slides])

        translated = await self._run_step(
            "find_by_barcode",
            f"Making a POST request for slide information for slides with barcode content {settings.example_barcodes}",
            _translate,
        )
        if translated is not None and self._hooks.slides_found:
            self._hooks.slides_found(self._result.slides)


async def run_example_flow(
    api_config: ApiConfig,
    settings: AppSettings | None = None,
    *,
    hooks: FlowHooks | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    lookup_factory: LookupFactory | None = None,
) -> FlowResult:
    flow = ExampleFlow(
        api_config,
        settings,
        hooks=hooks,
        transport=transport,
        lookup_factory=lookup_factory,
    )
    return await flow.run()

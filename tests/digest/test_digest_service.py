from __future__ import annotations

import pytest

from pulsedigest.config import AppConfig, GenerationConfig, StoreConfig
from pulsedigest.digest import DigestLoader, DigestService, GenerationService
from pulsedigest.store import StoreClient, StoreRequestError
from tests.helpers import FakeSource, RecordingSession, digest_object, make_response


def _service(source: FakeSource, *, with_generation: bool = False) -> DigestService:
    loader = DigestLoader(source)
    generation = None
    if with_generation:
        config = GenerationConfig(interaction="i", environment_id="e", model="m", wait_seconds=0)
        generation = GenerationService(source, loader, config, sleep=lambda _: None)
    return DigestService(loader, generation)


def test_initial_state_is_idle() -> None:
    state = _service(FakeSource()).state()

    assert state.status == "idle"
    assert state.digest is None
    assert state.to_dict()["has_digest"] is False


def test_refresh_success_sets_active_state() -> None:
    service = _service(FakeSource([digest_object()]))

    digest = service.refresh()

    assert digest is not None
    assert service.current is digest
    state = service.state()
    assert state.status == "active"
    assert state.last_error is None
    assert state.last_refreshed is not None


def test_refresh_failure_keeps_previous_digest() -> None:
    source = FakeSource([digest_object()])
    service = _service(source)
    first = service.refresh()

    source.objects.clear()
    assert service.refresh() is None

    state = service.state()
    assert state.status == "error"
    assert state.last_error == "No documents found in object store"
    assert service.current is first


def test_refresh_handles_store_errors() -> None:
    class BrokenSource(FakeSource):
        def list_objects(self, limit: int = 1000, offset: int = 0):  # type: ignore[override]
            raise StoreRequestError("API call failed: 401 Unauthorized", status_code=401)

    service = _service(BrokenSource())

    assert service.refresh() is None
    assert service.state().last_error == "API call failed: 401 Unauthorized"


def test_generate_requires_configuration() -> None:
    service = _service(FakeSource())

    assert not service.can_generate
    with pytest.raises(RuntimeError):
        service.generate()


def test_generate_adopts_reloaded_digest() -> None:
    service = _service(FakeSource([digest_object()]), with_generation=True)

    digest = service.generate()

    assert digest is not None
    assert service.current is digest
    assert service.state().status == "active"


def test_generate_failure_is_recorded_and_raised() -> None:
    service = _service(FakeSource([]), with_generation=True)

    with pytest.raises(Exception, match="No documents found"):
        service.generate()
    assert service.state().status == "error"


def test_generate_without_wait_leaves_idle_status() -> None:
    service = _service(FakeSource([digest_object()]), with_generation=True)

    assert service.generate(wait=False) is None
    assert service.state().status == "idle"


def test_from_config_requires_store() -> None:
    with pytest.raises(ValueError):
        DigestService.from_config(AppConfig())


def test_from_config_wires_generation() -> None:
    config = AppConfig(
        store=StoreConfig(base_url="https://api.test", api_key="literal-key"),
        generation=GenerationConfig(interaction="i", environment_id="e", model="m"),
    )

    service = DigestService.from_config(config, client=FakeSource())  # type: ignore[arg-type]

    assert service.can_generate
    assert not DigestService.from_config(config.model_copy(update={"generation": None})).can_generate


def _store_backed_service(*responses: object) -> DigestService:
    session = RecordingSession(list(responses))  # type: ignore[arg-type]
    client = StoreClient("https://api.test/v1", "key", max_retries=1, retry_delay=0, session=session)
    return DigestService(DigestLoader(client))


def test_refresh_survives_malformed_json_listing() -> None:
    service = _store_backed_service(make_response(text="<html>gateway</html>", content_type="application/json"))

    assert service.refresh() is None

    state = service.state()
    assert state.status == "error"
    assert state.last_error == "Invalid JSON from /objects"


def test_refresh_survives_listing_without_identifiers() -> None:
    listing = [{"name": "Pulse digest", "updated_at": "2025-03-03T07:00:00Z"}]
    service = _store_backed_service(make_response(payload=listing))

    assert service.refresh() is None

    state = service.state()
    assert state.status == "error"
    assert state.last_error == "No digest document found"

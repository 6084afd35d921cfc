import pytest

from radio_auth.core.rate_limiting import RateLimitingService
from tests.utils.fakes import InMemoryRateLimitRepository

EMAIL = "editor@resistanceradio.org"


@pytest.fixture
def service(rate_limit_repository, clock):
    return RateLimitingService(
        rate_limit_repository, max_attempts=3, window_minutes=60, clock=clock
    )


async def _request(service, identifier=EMAIL):
    decision = await service.check_rate_limit(identifier)
    if decision.allowed:
        await service.record_attempt(identifier)
    return decision


@pytest.mark.asyncio
async def test_check_creates_record_without_counting(service, rate_limit_repository):
    decision = await service.check_rate_limit(EMAIL)

    assert decision.allowed is True
    assert decision.retry_after_seconds is None
    assert rate_limit_repository.records[EMAIL].attempt_count == 0


@pytest.mark.asyncio
async def test_fourth_request_in_window_is_blocked(service, clock):
    for _ in range(3):
        assert (await _request(service)).allowed is True

    clock.advance(minutes=10)
    decision = await service.check_rate_limit(EMAIL)

    assert decision.allowed is False
    assert decision.retry_after_seconds == 50 * 60


@pytest.mark.asyncio
async def test_retry_after_rounds_up_partial_seconds(service, clock):
    for _ in range(3):
        await _request(service)

    clock.advance(minutes=59, seconds=59, milliseconds=500)
    decision = await service.check_rate_limit(EMAIL)

    assert decision.allowed is False
    assert decision.retry_after_seconds == 1


@pytest.mark.asyncio
async def test_window_lapse_allows_and_restarts_count(service, rate_limit_repository, clock):
    for _ in range(3):
        await _request(service)

    clock.advance(minutes=60)
    decision = await _request(service)

    record = rate_limit_repository.records[EMAIL]
    assert decision.allowed is True
    assert record.attempt_count == 1
    assert record.window_start == clock.now


@pytest.mark.asyncio
async def test_identifier_is_normalized(service, rate_limit_repository):
    await _request(service, "  Editor@ResistanceRadio.ORG ")
    await _request(service, EMAIL)

    assert list(rate_limit_repository.records) == [EMAIL]
    assert rate_limit_repository.records[EMAIL].attempt_count == 2


@pytest.mark.asyncio
async def test_record_without_prior_check_starts_window(service, rate_limit_repository, clock):
    await service.record_attempt(EMAIL)

    record = rate_limit_repository.records[EMAIL]
    assert record.attempt_count == 1
    assert record.window_start == clock.now


@pytest.mark.asyncio
async def test_limits_are_per_identifier(service):
    for _ in range(3):
        await _request(service)

    other = await service.check_rate_limit("someone.else@resistanceradio.org")

    assert other.allowed is True


@pytest.mark.asyncio
async def test_check_fails_open(clock):
    service = RateLimitingService(
        InMemoryRateLimitRepository(fail=True), max_attempts=3, window_minutes=60, clock=clock
    )

    decision = await service.check_rate_limit(EMAIL)

    assert decision.allowed is True


@pytest.mark.asyncio
async def test_record_swallows_storage_errors(clock):
    service = RateLimitingService(
        InMemoryRateLimitRepository(fail=True), max_attempts=3, window_minutes=60, clock=clock
    )

    await service.record_attempt(EMAIL)


@pytest.mark.asyncio
async def test_cleanup_removes_only_stale_records(service, rate_limit_repository, clock):
    await _request(service, "old@resistanceradio.org")
    clock.advance(minutes=61)
    await _request(service, "new@resistanceradio.org")

    deleted = await service.cleanup_expired_records()

    assert deleted == 1
    assert list(rate_limit_repository.records) == ["new@resistanceradio.org"]


@pytest.mark.asyncio
async def test_cleanup_failure_returns_zero(clock):
    service = RateLimitingService(InMemoryRateLimitRepository(fail=True), clock=clock)

    assert await service.cleanup_expired_records() == 0


class TestDefaultWindow:
    """Three requests per address in a fifteen minute window."""

    @pytest.fixture
    def default_service(self, rate_limit_repository, clock):
        return RateLimitingService(rate_limit_repository, clock=clock)

    @pytest.mark.asyncio
    async def test_fourth_request_waits_for_the_rest_of_the_window(self, default_service, clock):
        for _ in range(3):
            assert (await _request(default_service)).allowed is True

        clock.advance(minutes=6, seconds=30)
        decision = await default_service.check_rate_limit(EMAIL)

        assert decision.allowed is False
        assert decision.retry_after_seconds == 900 - 390

    @pytest.mark.asyncio
    async def test_one_second_before_window_closes(self, default_service, clock):
        for _ in range(3):
            await _request(default_service)

        clock.advance(minutes=14, seconds=59)
        decision = await default_service.check_rate_limit(EMAIL)

        assert decision.allowed is False
        assert decision.retry_after_seconds == 1

    @pytest.mark.asyncio
    async def test_allowed_once_fifteen_minutes_pass(
        self, default_service, rate_limit_repository, clock
    ):
        for _ in range(3):
            await _request(default_service)

        clock.advance(minutes=15)
        decision = await _request(default_service)

        assert decision.allowed is True
        assert rate_limit_repository.records[EMAIL].attempt_count == 1

import asyncio

from core_logging import get_logger, log_stage


def test_log_stage_imperative():
    logger = get_logger("test-log-stage")
    log_stage(
        logger,
        "ownership",
        "check_passed",
        request_id="abc123",
        company_id=42,
        check="node_in_company",
    )


def test_log_stage_decorator_sync():
    logger = get_logger("test-log-stage-sync")

    @log_stage(logger, "unit", "event.sync")
    def add(a, b):
        return a + b

    assert add(2, 3) == 5


def test_log_stage_decorator_async():
    logger = get_logger("test-log-stage-async")

    @log_stage(logger, "graph", "fanout")
    async def mul(a, b):
        return a * b

    assert asyncio.run(mul(4, 5)) == 20


def test_log_stage_context_manager():
    logger = get_logger("test-log-stage-ctx")
    with log_stage(logger, "upstream", "call").ctx(url="http://flows.test/v1/nodes/"):
        pass

"""Tests for RecordMovementUseCase."""

from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from eggledger.application.dto.requests import RecordMovementRequest
from eggledger.application.use_cases.record_movement import RecordMovementUseCase
from eggledger.core.entities import MovementKind, WeightedInventory
from eggledger.core.exceptions import InvalidInputError
from eggledger.core.services import Ledger


@pytest.fixture
def use_case(ledger: Ledger) -> RecordMovementUseCase:
    return RecordMovementUseCase(ledger)


class TestRecordMovementUseCase:
    async def test_incoming_builds_inventories(self, use_case: RecordMovementUseCase):
        request = RecordMovementRequest(
            kind="incoming",
            rosado={7: [5, 0, 0, 0, 0, 0, 0, 0, 0, 0]},
            pardo={9: [0, 0, 2, 0, 0, 0, 0, 0, 0, 0]},
            supplier="  Farm1 ",
        )
        result = await use_case.execute(request)

        assert result.movement.supplier == "Farm1"
        assert result.stock.total_packages == 7
        assert result.stock.total_weight == 53.0
        assert result.stock.pardo_packages.packages_for_class(9)[2] == 2

    def test_json_style_keys_accepted(self):
        request = RecordMovementRequest.model_validate(
            {"kind": "outgoing", "rosado": {"8": [1, 0, 0, 0, 0, 0, 0, 0, 0, 0]}}
        )
        assert request.rosado == {8: [1, 0, 0, 0, 0, 0, 0, 0, 0, 0]}

    def test_unknown_kind_rejected_by_request(self):
        with pytest.raises(ValidationError):
            RecordMovementRequest(kind="gift")

    async def test_bad_weight_class(self, use_case: RecordMovementUseCase):
        request = RecordMovementRequest(kind="incoming", rosado={14: [1] + [0] * 9})
        with pytest.raises(InvalidInputError) as exc_info:
            await use_case.execute(request)
        assert exc_info.value.details["field"] == "weight"

    async def test_wrong_counter_length(self, use_case: RecordMovementUseCase):
        request = RecordMovementRequest(kind="incoming", rosado={7: [1, 2, 3]})
        with pytest.raises(InvalidInputError):
            await use_case.execute(request)

    async def test_negative_counter(self, use_case: RecordMovementUseCase):
        request = RecordMovementRequest(kind="incoming", rosado={7: [-1] + [0] * 9})
        with pytest.raises(InvalidInputError):
            await use_case.execute(request)

    async def test_clamped_outgoing_response(self, use_case: RecordMovementUseCase):
        await use_case.execute(
            RecordMovementRequest(kind="incoming", rosado={7: [2] + [0] * 9}, supplier="Farm1")
        )
        result = await use_case.execute(
            RecordMovementRequest(kind="outgoing", rosado={7: [5] + [0] * 9})
        )
        response = use_case.to_response(result)

        assert response.clamped is True
        assert response.shortfall == {"rosado": 3}
        assert response.stock.total_packages == 0
        assert response.movement.kind == "outgoing"

    async def test_delegates_to_ledger(self):
        ledger = AsyncMock(spec=Ledger)
        use_case = RecordMovementUseCase(ledger)

        await use_case.execute(RecordMovementRequest(kind="adjustment", notes="count"))

        ledger.record_movement.assert_awaited_once()
        args, kwargs = ledger.record_movement.call_args
        assert args[0] is MovementKind.ADJUSTMENT
        assert kwargs["rosado"] == WeightedInventory()
        assert kwargs["notes"] == "count"

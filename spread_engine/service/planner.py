"""SplitPlanner - dict-in / dict-out facade over the split engine"""

import logging
import time
import uuid
from dataclasses import replace
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from spread_engine.config import Settings, settings
from spread_engine.domain.exceptions import InvalidAmountError, InvalidOptionsError, InvalidPayloadError
from spread_engine.domain.models import Need, RejectedNeed, SplitOptions
from spread_engine.domain.money import to_cents
from spread_engine.domain.split import compute_split
from spread_engine.infrastructure.observability.logging import log_split
from spread_engine.infrastructure.observability.metrics import record_split
from spread_engine.service.schemas import NeedRecord, SplitRequest, SplitResponse

logger = logging.getLogger(__name__)


def _parse_needs(records: List[Dict[str, Any]]) -> Tuple[List[Need], List[RejectedNeed]]:
    """Validate need rows one by one; a bad row is reported, not fatal"""
    needs: List[Need] = []
    rejected: List[RejectedNeed] = []

    for index, raw in enumerate(records):
        try:
            record = NeedRecord.model_validate(raw)
        except ValidationError as e:
            need_id = str(raw.get("id", f"#{index}")) if isinstance(raw, dict) else f"#{index}"
            reason = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            logger.warning("Rejected need %s: %s", need_id, reason, extra={"need_id": need_id})
            rejected.append(RejectedNeed(need_id=need_id, reason=reason))
            continue

        if not record.is_collecting:
            logger.debug("Skipping need %s with status %s", record.id, record.status)
            continue
        needs.append(record.to_need())

    return needs, rejected


class SplitPlanner:
    """
    Plan a "Spread the Love" contribution from plain records.

    Parses the request, runs compute_split, records metrics and logs the
    outcome. Returns the serialized SplitResponse with camelCase keys and
    amounts as two-decimal strings.
    """

    def __init__(self, config: Settings | None = None):
        self.config = config or settings

    def plan(self, payload: Dict[str, Any], request_id: str | None = None) -> Dict[str, Any]:
        """
        Flow:
        1. Validate the request envelope
        2. Validate each need row, keep collecting needs
        3. Compute the split
        4. Record metrics and logs
        5. Return the serialized response

        Raises:
            InvalidPayloadError: Request envelope is malformed
            InvalidAmountError: Contribution amount is invalid
            InvalidOptionsError: Mode or options are out of range
        """
        start_time = time.time()
        request_id = request_id or str(uuid.uuid4())

        try:
            request = SplitRequest.model_validate(payload)
        except ValidationError as e:
            logger.warning("Invalid split payload: %s", e, extra={"request_id": request_id})
            raise InvalidPayloadError(str(e)) from e

        needs, rejected = _parse_needs(request.needs)
        options = SplitOptions(
            category_filter=request.category_filter,
            max_recipients=request.max_recipients,
            need_ids=tuple(request.need_ids) if request.need_ids is not None else None,
            category_weights=request.category_weights,
            seed=request.seed,
            fee_rate=request.fee_rate,
        )

        try:
            result = compute_split(request.amount, needs, request.mode, options, config=self.config)
        except (InvalidAmountError, InvalidOptionsError) as e:
            logger.warning("Split rejected: %s", e, extra={"request_id": request_id})
            raise

        if rejected:
            result = replace(result, rejected=tuple(rejected) + result.rejected)

        if result.unallocated_amount > 0:
            logger.info(
                "Contribution exceeds open gaps; remainder returned to caller",
                extra={"request_id": request_id, "unallocated_cents": to_cents(result.unallocated_amount)},
            )

        duration_ms = (time.time() - start_time) * 1000
        record_split(result)
        log_split(
            request_id=request_id,
            mode=result.mode.value,
            total_amount_cents=to_cents(result.total_amount),
            unallocated_cents=to_cents(result.unallocated_amount),
            total_people=result.total_people,
            goals_completed=result.goals_completed,
            rejected_count=len(result.rejected),
            duration_ms=duration_ms,
        )

        return SplitResponse.from_result(result).model_dump(mode="json", by_alias=True)

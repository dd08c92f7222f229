"""챕터 저장 충돌 해결

(책, 시리즈, 번호) 키에 이미 챕터가 있을 때 덮어쓸지, 버릴지,
새 번호로 저장할지 결정한다. 실제 저장은 호출자(ChapterStore)가 한다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union
from novel_archiver.errors import InvalidArgumentError
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)


class ConflictAction(str, Enum):
    """호출자가 지정하는 충돌 처리 방식"""
    OVERWRITE = "overwrite"
    DISCARD = "discard"
    NEW_NUMBER = "new_number"


class ResolutionOutcome(str, Enum):
    """충돌 해결 결과"""
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"
    RENUMBER = "renumber"


@dataclass(frozen=True)
class Resolution:
    """충돌 해결 결과

    Attributes:
        outcome: create / update / skip / renumber
        effective_number: 실제로 저장할 챕터 번호
    """
    outcome: ResolutionOutcome
    effective_number: int


def _candidate_number(candidate: Any) -> int:
    if isinstance(candidate, dict):
        number = candidate.get("number", candidate.get("chapter_number"))
    else:
        number = getattr(candidate, "number", None)
    if isinstance(number, bool) or not isinstance(number, int):
        raise InvalidArgumentError(f"Candidate has no chapter number: {candidate!r}")
    return number


def _parse_action(action: Union[ConflictAction, str, None]) -> Optional[ConflictAction]:
    if action is None or action == "":
        return None
    try:
        return ConflictAction(action)
    except ValueError:
        raise InvalidArgumentError(f"Unknown conflict action: {action!r}") from None


def resolve_conflict(
    existing: Optional[Any],
    candidate: Any,
    action: Union[ConflictAction, str, None] = None,
    new_number: Optional[int] = None,
) -> Resolution:
    """기존 레코드와 새 후보 사이의 충돌 해결

    액션이 없으면 기존 챕터를 갱신한다 (같은 챕터를 다시 긁어 더 긴 버전을
    얻는 경우가 대부분).

    Args:
        existing: 같은 키의 기존 레코드 (없으면 None)
        candidate: ChapterCandidate 또는 number 키를 가진 dict
        action: "overwrite" / "discard" / "new_number" / None
        new_number: action 이 "new_number" 일 때 사용할 번호

    Returns:
        Resolution

    Raises:
        InvalidArgumentError: 알 수 없는 액션, new_number 누락, 번호 없는 후보
    """
    number = _candidate_number(candidate)
    parsed = _parse_action(action)

    if parsed is ConflictAction.NEW_NUMBER:
        if isinstance(new_number, bool) or not isinstance(new_number, int) or new_number <= 0:
            raise InvalidArgumentError(f"Action 'new_number' requires a positive new_number, got {new_number!r}")

    if existing is None:
        return Resolution(ResolutionOutcome.CREATE, number)

    if parsed is None or parsed is ConflictAction.OVERWRITE:
        logger.debug(f"Conflict on chapter {number}: updating existing record")
        return Resolution(ResolutionOutcome.UPDATE, number)

    if parsed is ConflictAction.DISCARD:
        logger.debug(f"Conflict on chapter {number}: discarding candidate")
        return Resolution(ResolutionOutcome.SKIP, number)

    logger.debug(f"Conflict on chapter {number}: renumbering to {new_number}")
    return Resolution(ResolutionOutcome.RENUMBER, new_number)

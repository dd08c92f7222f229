"""예외 정의

코어 함수는 파싱 실패 시 예외 대신 None / 0 / [] 를 반환한다.
아래 예외는 호출자의 계약 위반에만 사용된다.
"""


class NovelArchiverError(Exception):
    """novel_archiver 기본 예외"""
    pass


class InvalidInputError(NovelArchiverError, ValueError):
    """잘못된 타입/값의 입력 (예: 문자열이 아닌 본문)"""
    pass


class InvalidArgumentError(NovelArchiverError, ValueError):
    """충돌 해결 등에서 잘못된 인자 조합 (예: new_number 없는 'new_number' 액션)"""
    pass

"""문서 가져오기

파일 분석 → 챕터 분할 → 본문 재포맷 → 저장.
여러 파일은 ThreadPoolExecutor 로 분석/재포맷하고 저장은 호출 스레드에서만 한다.
"""

import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from novel_archiver.config.loader import Config, get_config
from novel_archiver.stages.chapter import ChapterCandidate
from novel_archiver.stages.chapter_store import ChapterStore
from novel_archiver.stages.conflict import ConflictAction, ResolutionOutcome
from novel_archiver.stages.file_analyzer import FileAnalysis, analyze_file
from novel_archiver.stages.reformatter import build_chapter_title, reformat_chapter_content
from novel_archiver.stages.tag_extractor import extract_tags
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], None]


class ProgressRegistry:
    """작업(job)별 진행 상황 콜백 관리

    콜백 예외는 로그만 남기고 작업은 계속한다.
    """

    def __init__(self):
        self._callbacks: Dict[str, List[ProgressCallback]] = defaultdict(list)
        self._lock = threading.Lock()

    def register(self, job_id: str, callback: ProgressCallback) -> None:
        with self._lock:
            self._callbacks[job_id].append(callback)

    def unregister(self, job_id: str, callback: Optional[ProgressCallback] = None) -> None:
        """콜백 해제 (callback 이 None 이면 해당 job 의 콜백 전부)"""
        with self._lock:
            if callback is None:
                self._callbacks.pop(job_id, None)
                return
            callbacks = self._callbacks.get(job_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._callbacks.pop(job_id, None)

    def emit(self, job_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            callbacks = list(self._callbacks.get(job_id, []))
        for callback in callbacks:
            try:
                callback(dict(data, job_id=job_id))
            except Exception as e:
                logger.error(f"Error emitting progress for job {job_id}: {e}")


@dataclass
class PreparedDocument:
    """분석·재포맷이 끝난 문서 (저장 전)"""
    path: str
    analysis: FileAnalysis
    contents: List[str]

    @property
    def chapters(self) -> List[ChapterCandidate]:
        return self.analysis.chapters


@dataclass
class ImportResult:
    """파일 하나 가져오기 결과"""
    path: str
    book_name: Optional[str] = None
    book_id: Optional[int] = None
    outcomes: Dict[str, int] = field(default_factory=lambda: {o.value: 0 for o in ResolutionOutcome})
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def total(self) -> int:
        return sum(self.outcomes.values())


class DocumentImporter:
    """문서 가져오기"""

    def __init__(
        self,
        store: ChapterStore,
        config: Optional[Config] = None,
        progress: Optional[ProgressRegistry] = None,
    ):
        """
        Args:
            store: ChapterStore
            config: 설정 (None 이면 get_config())
            progress: 진행 상황 콜백 레지스트리
        """
        self.store = store
        self.config = config or get_config()
        self.progress = progress or ProgressRegistry()
        logger.info("DocumentImporter initialized")

    def prepare(self, file_path: str, original_filename: Optional[str] = None) -> PreparedDocument:
        """분석 + 재포맷 (DB 접근 없음, 워커 스레드에서 실행 가능)"""
        processing = self.config.processing
        encoding = None if processing.auto_detect_encoding else processing.default_encoding
        analysis = analyze_file(
            file_path,
            original_filename=original_filename,
            encoding=encoding,
            default_encoding=processing.default_encoding,
        )
        contents = [
            reformat_chapter_content(
                chapter.content,
                build_chapter_title(chapter.number, chapter.name, chapter.is_final),
                convert_to_traditional=processing.convert_to_traditional,
                verbose=processing.verbose_reformat,
            )
            for chapter in analysis.chapters
        ]
        return PreparedDocument(path=file_path, analysis=analysis, contents=contents)

    def persist(
        self,
        prepared: PreparedDocument,
        book_name: Optional[str] = None,
        action: Union[ConflictAction, str, None] = None,
        job_id: Optional[str] = None,
    ) -> ImportResult:
        """준비된 문서 저장"""
        action = action if action is not None else self.config.processing.default_conflict_action
        analysis = prepared.analysis
        name = book_name or analysis.book_name
        result = ImportResult(path=prepared.path, book_name=name)

        result.book_id = self.store.get_or_create_book(name, analysis.metadata)
        self.store.add_tags(result.book_id, extract_tags(name, analysis.metadata.get("description", "")))

        total = len(prepared.chapters)
        for index, (chapter, content) in enumerate(zip(prepared.chapters, prepared.contents), start=1):
            resolution = self.store.save_candidate(
                result.book_id,
                chapter,
                content,
                action=action,
                source_url=analysis.metadata.get("source_url"),
            )
            result.outcomes[resolution.outcome.value] += 1
            if job_id:
                self.progress.emit(job_id, {
                    "type": "chapter",
                    "file": prepared.path,
                    "chapter": chapter.key,
                    "outcome": resolution.outcome.value,
                    "current": index,
                    "total": total,
                })

        logger.info(f"✅ Imported {Path(prepared.path).name}: {result.outcomes}")
        return result

    def import_file(
        self,
        file_path: str,
        book_name: Optional[str] = None,
        action: Union[ConflictAction, str, None] = None,
        job_id: Optional[str] = None,
        original_filename: Optional[str] = None,
    ) -> ImportResult:
        """파일 하나 가져오기 (예외는 그대로 전파)"""
        prepared = self.prepare(file_path, original_filename=original_filename)
        return self.persist(prepared, book_name=book_name, action=action, job_id=job_id)

    def import_files(
        self,
        file_paths: Sequence[str],
        book_name: Optional[str] = None,
        action: Union[ConflictAction, str, None] = None,
        job_id: Optional[str] = None,
    ) -> List[ImportResult]:
        """여러 파일 가져오기

        실패한 파일은 error 를 채운 결과로 남기고 다음 파일을 계속 처리한다.

        Returns:
            입력 순서와 같은 ImportResult 리스트
        """
        if not file_paths:
            return []

        max_workers = max(1, self.config.processing.max_workers)
        results: Dict[str, ImportResult] = {}
        logger.info(f"Importing {len(file_paths)} files (workers={max_workers})")

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {executor.submit(self.prepare, path): path for path in file_paths}
            for done, future in enumerate(as_completed(futures), start=1):
                path = futures[future]
                try:
                    results[path] = self.persist(future.result(), book_name=book_name, action=action, job_id=job_id)
                except Exception as e:
                    logger.error(f"Import failed: {path} - {e}")
                    results[path] = ImportResult(path=path, error=str(e))
                if job_id:
                    self.progress.emit(job_id, {
                        "type": "file",
                        "file": path,
                        "success": results[path].success,
                        "current": done,
                        "total": len(file_paths),
                    })

        ok = sum(1 for r in results.values() if r.success)
        logger.info(f"✅ Import finished: {ok}/{len(file_paths)} files")
        return [results[path] for path in file_paths]

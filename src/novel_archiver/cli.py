"""CLI 인터페이스

Typer 기반 명령줄 인터페이스, Rich 기반 출력
"""

import typer
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table
from rich.panel import Panel
from novel_archiver.config.loader import configure_logging, get_config
from novel_archiver.db.schema import get_database
from novel_archiver.stages.chapter import ChapterCandidate, DEFAULT_SERIES
from novel_archiver.stages.chapter_store import ChapterStore
from novel_archiver.stages.chunker import create_chunks_from_chapters, generate_chunk_filename
from novel_archiver.stages.conflict import ConflictAction
from novel_archiver.stages.file_analyzer import analyze_file
from novel_archiver.stages.importer import DocumentImporter
from novel_archiver.stages.reformatter import build_chapter_title, reformat_chapter_content
from novel_archiver.stages.title_metadata import parse_title_metadata
from novel_archiver.utils.logger import get_logger

logger = get_logger(__name__)
console = Console()
app = typer.Typer(help="Novel Archiver - 웹소설 챕터 분할·정리 도구")


@app.callback()
def main():
    """config.yml 의 로그 설정 적용"""
    configure_logging(get_config())


def chapter_filename(chapter: ChapterCandidate) -> str:
    """챕터 파일명 (chap12.md, chap_番外_3.md, chap_final.md)"""
    suffix = "final" if chapter.is_final else str(chapter.number)
    if chapter.series != DEFAULT_SERIES:
        return f"chap_{chapter.series}_{suffix}.md"
    return "chap_final.md" if chapter.is_final else f"chap{suffix}.md"


@app.command()
def analyze(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="분석할 파일 (.txt/.md/.html)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="출력 폴더"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", "-c", help="청크당 최대 줄 수"),
    simplified: bool = typer.Option(False, "--simplified", help="번체 변환 안 함"),
):
    """파일 분석: 챕터 분할 + 재포맷 결과를 파일로 저장"""
    console.print(Panel.fit(f"🔍 분석: {file.name}", style="bold blue"))
    config = get_config()
    convert = config.processing.convert_to_traditional and not simplified
    chunk_size = chunk_size or config.processing.chunk_size

    analysis = analyze_file(str(file), default_encoding=config.processing.default_encoding)
    output_dir = (output or Path(config.paths.output_folder)) / analysis.book_name
    (output_dir / "chap").mkdir(parents=True, exist_ok=True)
    (output_dir / "chunk").mkdir(parents=True, exist_ok=True)

    reformatted = []
    unstable = 0
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console
    ) as progress:
        task = progress.add_task("[cyan]챕터 재포맷 중...", total=analysis.total_chapters)
        for chapter in analysis.chapters:
            title = build_chapter_title(chapter.number, chapter.name, chapter.is_final)
            content = reformat_chapter_content(
                chapter.content, title,
                convert_to_traditional=convert,
                verbose=config.processing.verbose_reformat,
            )
            # 재포맷을 다시 적용해도 같아야 한다
            if reformat_chapter_content(content, title, convert_to_traditional=convert) != content:
                unstable += 1
                logger.warning(f"Reformat not idempotent: {chapter.key}")
            (output_dir / "chap" / chapter_filename(chapter)).write_text(content, encoding="utf-8")
            reformatted.append({"number": chapter.number, "title": title, "content": content})
            progress.update(task, advance=1)

    (output_dir / "book.md").write_text("\n\n".join(c["content"] for c in reformatted), encoding="utf-8")

    chunks = create_chunks_from_chapters(
        reformatted, analysis.book_name, chunk_size, analysis.metadata, convert_to_traditional=convert,
    )
    for chunk in chunks:
        name = generate_chunk_filename(analysis.book_name, chunk.chunk_number)
        (output_dir / "chunk" / name).write_text(chunk.content, encoding="utf-8")

    table = Table(title="분석 결과")
    table.add_column("항목", style="cyan")
    table.add_column("값", style="green")
    table.add_row("책 이름", analysis.book_name)
    for key, value in analysis.metadata.items():
        table.add_row(key, value)
    table.add_row("챕터", str(analysis.total_chapters))
    table.add_row("청크", str(len(chunks)))
    table.add_row("재포맷 불안정", str(unstable))
    table.add_row("출력 폴더", str(output_dir))
    console.print(table)

    chapters_table = Table(title="챕터 목록")
    chapters_table.add_column("키", style="cyan")
    chapters_table.add_column("제목", style="green")
    chapters_table.add_column("줄", style="yellow")
    for chapter in analysis.chapters:
        chapters_table.add_row(
            chapter.key,
            build_chapter_title(chapter.number, chapter.name, chapter.is_final),
            f"{chapter.line_start}-{chapter.line_end}",
        )
    console.print(chapters_table)


@app.command()
def title(text: str = typer.Argument(..., help="챕터 제목 문자열")):
    """제목 문자열에서 책 이름/챕터 번호/이름 추출"""
    metadata = parse_title_metadata(text)
    if metadata is None:
        console.print("[yellow]인식된 정보가 없습니다[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title="제목 분석 결과")
    table.add_column("항목", style="cyan")
    table.add_column("값", style="green")
    table.add_row("책 이름", metadata.book_name or "-")
    if metadata.is_final:
        number = "終"
    elif metadata.chapter_number is not None:
        number = str(metadata.chapter_number)
    else:
        number = "-"
    table.add_row("챕터 번호", number)
    table.add_row("챕터 이름", metadata.chapter_name or "-")
    table.add_row("시리즈", metadata.series)
    console.print(table)


@app.command("import")
def import_(
    files: List[Path] = typer.Argument(..., exists=True, dir_okay=False, help="가져올 파일들"),
    book: Optional[str] = typer.Option(None, "--book", "-b", help="책 이름 (기본: 파일에서 감지)"),
    on_conflict: Optional[str] = typer.Option(None, "--on-conflict", help="overwrite / discard"),
    db_path: Optional[str] = typer.Option(None, "--db", help="DB 파일 경로"),
):
    """파일을 챕터 단위로 DB 에 저장"""
    if on_conflict not in (None, ConflictAction.OVERWRITE.value, ConflictAction.DISCARD.value):
        console.print(f"[red]지원하지 않는 --on-conflict 값: {on_conflict}[/red]")
        raise typer.Exit(code=2)

    console.print(Panel.fit(f"📥 가져오기: {len(files)}개 파일", style="bold blue"))
    config = get_config()
    db = get_database(db_path or config.paths.database)
    importer = DocumentImporter(ChapterStore(db), config=config)

    results = importer.import_files([str(f) for f in files], book_name=book, action=on_conflict)

    table = Table(title="가져오기 결과")
    table.add_column("파일", style="cyan")
    table.add_column("책", style="green")
    table.add_column("생성", style="green")
    table.add_column("갱신", style="yellow")
    table.add_column("무시", style="magenta")
    table.add_column("오류", style="red")
    for result in results:
        table.add_row(
            Path(result.path).name,
            result.book_name or "-",
            str(result.outcomes["create"]),
            str(result.outcomes["update"]),
            str(result.outcomes["skip"]),
            result.error or "",
        )
    console.print(table)
    db.close()

    if not all(result.success for result in results):
        raise typer.Exit(code=1)


@app.command()
def chapters(
    book: str = typer.Argument(..., help="책 이름"),
    db_path: Optional[str] = typer.Option(None, "--db", help="DB 파일 경로"),
):
    """저장된 챕터 목록"""
    config = get_config()
    db = get_database(db_path or config.paths.database)
    store = ChapterStore(db)

    row = store.find_book(book)
    if row is None:
        console.print(f"[red]책을 찾을 수 없습니다: {book}[/red]")
        db.close()
        raise typer.Exit(code=1)

    table = Table(title=f"{row['book_name_traditional'] or row['book_name_simplified']} ({row['total_chapters']}章)")
    table.add_column("시리즈", style="cyan")
    table.add_column("번호", style="yellow")
    table.add_column("제목", style="green")
    table.add_column("글자 수")
    table.add_column("상태")
    for chapter in store.list_chapters(row["id"]):
        table.add_row(
            chapter["series"],
            str(chapter["chapter_number"]),
            chapter["chapter_title"] or "",
            str(len(chapter["content"] or "")),
            chapter["status"],
        )
    console.print(table)
    db.close()


if __name__ == "__main__":
    app()

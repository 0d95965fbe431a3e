"""
[IL-H001] intentloop.cli.main
Typer CLI 엔트리포인트 - 의도 평가/추정 커맨드라인 인터페이스

version: 1.1.0
created: 2026-10-06
modified: 2026-10-15
dependencies: typer>=0.23.1, rich>=14.3.2
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import structlog
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from intentloop import __version__
from intentloop.classification.cost import CostEstimator
from intentloop.classification.estimator import IntentEstimator
from intentloop.classification.prompts import INTENT_DESCRIPTIONS
from intentloop.classification.replies import quick_reply
from intentloop.core.config import IntentloopConfig
from intentloop.core.exceptions import IntentloopError
from intentloop.core.logging import configure_logging
from intentloop.core.models import Metadata
from intentloop.core.types import Intent

if TYPE_CHECKING:
    from intentloop.classification.orchestrator import RetryOrchestrator
    from intentloop.core.models import EvaluationOutcome

logger = structlog.get_logger()

app = typer.Typer(
    name="intentloop",
    help="intentloop - LLM 기반 고객 메시지 의도분류 (제한된 재시도)",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:  # [IL-H001.1]
    """버전 정보를 출력합니다."""
    if value:
        console.print(f"intentloop v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", "-V", help="버전 정보 출력", callback=version_callback, is_eager=True
        ),
    ] = None,
) -> None:
    """intentloop - LiteLLM 기반 의도분류 + 재시도 오케스트레이터."""
    config = IntentloopConfig()
    configure_logging(config.log_level, config.log_format)


def _build_orchestrator(config: IntentloopConfig) -> RetryOrchestrator:  # [IL-H001.2]
    """설정으로 라우터 → 게이트웨이 → 오케스트레이터를 구성합니다."""
    from intentloop.classification.gateway import LLMClassificationGateway
    from intentloop.classification.orchestrator import RetryOrchestrator
    from intentloop.llm.router import LLMRouter
    from intentloop.storage.recorder import InMemoryInteractionRecorder

    gateway = LLMClassificationGateway(LLMRouter(config.llm), config.classifier)
    return RetryOrchestrator(
        gateway=gateway,
        cost=CostEstimator(config.cost),
        recorder=InMemoryInteractionRecorder(max_attempts=config.retry.max_attempts),
        config=config.retry,
    )


def _parse_intent(value: str) -> Intent:
    intent = Intent.parse(value)
    if intent is None:
        valid = ", ".join(i.value for i in Intent)
        raise typer.BadParameter(f"알 수 없는 의도: {value} (가능: {valid})")
    return intent


@app.command()  # [IL-H001.3]
def evaluate(
    message: Annotated[str, typer.Argument(help="분류할 고객 메시지")],
    expected: Annotated[str, typer.Option("--expected", "-e", help="기대 의도")],
    user_id: Annotated[str | None, typer.Option("--user", "-u", help="사용자 ID")] = None,
    source: Annotated[str, typer.Option("--source", "-s", help="요청 출처")] = "cli",
    session_id: Annotated[str | None, typer.Option("--session", help="세션 ID")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="JSON으로 출력")] = False,
) -> None:
    """메시지를 분류하고 기대 의도와 일치할 때까지 재시도합니다.

    예시: intentloop evaluate "¿Dónde está mi pedido?" -e tracking
    """
    expected_intent = _parse_intent(expected)
    metadata = Metadata(user_id=user_id, source=source, session_id=session_id)
    try:
        outcome = asyncio.run(_run_evaluate(message, expected_intent, metadata))
    except KeyboardInterrupt:
        err_console.print("\n중단됨.", style="yellow")
        raise typer.Exit(1) from None
    except IntentloopError as e:
        err_console.print(f"오류: {e}", style="red")
        raise typer.Exit(1) from e

    if as_json:
        console.print_json(outcome.model_dump_json())
        return
    _print_outcome(outcome)
    if not outcome.ok:
        raise typer.Exit(1)


async def _run_evaluate(
    message: str, expected: Intent, metadata: Metadata
) -> EvaluationOutcome:  # [IL-H001.4]
    """evaluate 명령의 비동기 실행부."""
    orchestrator = _build_orchestrator(IntentloopConfig())
    outcome = await orchestrator.evaluate(message, expected, metadata)
    await orchestrator.flush()
    return outcome


def _print_outcome(outcome: EvaluationOutcome) -> None:
    if outcome.ok:
        entities = ", ".join(f"{k}={v}" for k, v in (outcome.entities or {}).items()) or "-"
        body = (
            f"[bold]의도:[/bold] {outcome.intent}\n"
            f"[bold]시도:[/bold] {outcome.attempts_used}\n"
            f"[bold]엔티티:[/bold] {entities}\n"
            f"[bold]토큰:[/bold] {outcome.total_tokens}\n"
            f"[bold]비용:[/bold] {CostEstimator.format_cost(outcome.cost_usd or 0.0)}"
        )
        console.print(Panel(body, title="일치", border_style="green"))
        return

    body = f"[bold]시도:[/bold] {outcome.attempts_used}\n[bold]오류:[/bold] {outcome.error}"
    if outcome.last_error:
        body += f"\n[bold]마지막 에러:[/bold] {outcome.last_error}"
    console.print(Panel(body, title="불일치", border_style="red"))


@app.command()  # [IL-H001.5]
def estimate(
    message: Annotated[str, typer.Argument(help="고객 메시지")],
    keywords: Annotated[
        Path | None, typer.Option("--keywords", "-k", help="키워드 가중치 YAML 파일")
    ] = None,
) -> None:
    """키워드 점수로 기대 의도를 추정합니다 (LLM 호출 없음)."""
    config = IntentloopConfig()
    estimator = (
        IntentEstimator.from_yaml(keywords, config=config.estimator)
        if keywords
        else IntentEstimator(config=config.estimator)
    )
    intent = estimator.estimate(message)

    table = Table(title="키워드 점수")
    table.add_column("의도", style="cyan")
    table.add_column("점수", justify="right")
    for candidate, score in estimator.score_keywords(message):
        table.add_row(candidate.value, f"{score:.1f}")
    console.print(table)
    console.print(f"추정 의도: [bold green]{intent.value}[/bold green]")
    console.print(f"응답: {quick_reply(intent)}")


@app.command()  # [IL-H001.6]
def cost(
    tokens: Annotated[int, typer.Argument(help="토큰 수", min=0)],
) -> None:
    """토큰 수에 대한 예상 비용을 출력합니다."""
    estimator = CostEstimator(IntentloopConfig().cost)
    console.print(estimator.format_cost(estimator.cost(tokens)))


@app.command()  # [IL-H001.7]
def intents() -> None:
    """지원하는 의도 목록을 출력합니다."""
    table = Table(title="의도")
    table.add_column("값", style="cyan")
    table.add_column("설명")
    for intent, description in INTENT_DESCRIPTIONS.items():
        table.add_row(intent.value, description)
    console.print(table)

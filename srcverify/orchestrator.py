"""Pipeline orchestration for plan and verify runs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .arguments import PairingArgumentParser
from .classifier import FileClassifier
from .config import SrcVerifyConfig, load_config
from .errors import PairingGap
from .gpg.executor import VerificationExecutor
from .logging import get_logger
from .models import ClassifiedSource, FileRole, SourceFile, VerificationTriple
from .planner import PlanResolver
from .sources import SourceResolver, declare_sources


@dataclass
class PlanOutcome:
    """Everything decided before any external command runs."""

    classified: List[ClassifiedSource]
    default_keyring: Optional[SourceFile]
    triples: List[VerificationTriple]
    automatic: bool


@dataclass
class VerifyOutcome:
    """Result of a successful verification run."""

    plan: PlanOutcome
    verified: List[VerificationTriple]


class Orchestrator:
    """Coordinates classification, pairing and verification for one build.

    Each ``build_plan``/``run_verify`` call reloads configuration (unless a
    config was injected) and classifies with a fresh classifier, so reusing an
    instance never carries state from one build into the next.
    """

    def __init__(
        self,
        config: SrcVerifyConfig | None = None,
        executor: VerificationExecutor | None = None,
    ) -> None:
        self._config = config
        self._executor = executor
        self.logger = get_logger("orchestrator")

    def load_sources(
        self, specs: Sequence[str], sourcedir: str | Path | None = None
    ) -> List[SourceFile]:
        base = Path(sourcedir) if sourcedir is not None else None
        return declare_sources(specs, base)

    def build_plan(
        self,
        sources: Sequence[SourceFile],
        raw_args: str | None = None,
        default_keyring: str | None = None,
        *,
        config_path: Path | None = None,
    ) -> PlanOutcome:
        """Classify sources and resolve the verification plan."""
        config = self._resolve_config(sources, config_path)
        return self._plan(config, sources, raw_args, default_keyring)

    def run_verify(
        self,
        sources: Sequence[SourceFile],
        raw_args: str | None = None,
        default_keyring: str | None = None,
        *,
        config_path: Path | None = None,
    ) -> VerifyOutcome:
        """Resolve the plan and verify every triple, stopping at the first failure."""
        config = self._resolve_config(sources, config_path)
        plan = self._plan(config, sources, raw_args, default_keyring)
        executor = self._executor or VerificationExecutor(
            config.tools,
            tmpdir=config.verify.tmpdir,
            sniff_lines=config.classifier.sniff_lines,
        )
        report = executor.execute(plan.triples)
        self.logger.info("Verified %d signature(s)", len(report.verified))
        return VerifyOutcome(plan=plan, verified=report.verified)

    # ------------------------------------------------------------------
    # Internals

    def _plan(
        self,
        config: SrcVerifyConfig,
        sources: Sequence[SourceFile],
        raw_args: str | None,
        default_keyring: str | None,
    ) -> PlanOutcome:
        classifier = FileClassifier(config.classifier)
        resolver = SourceResolver(sources)

        classified = classifier.classify_all(sources)
        for entry in classified:
            if entry.role is not FileRole.PLAIN_SOURCE:
                self.logger.info("Found %s: %s", entry.role.value, entry.source.name)

        requests = PairingArgumentParser(resolver).parse(raw_args)
        plan = PlanResolver(resolver).build(classified, requests, default_keyring)

        if not plan.triples:
            if config.verify.require_signatures:
                raise PairingGap("(none)", "no signature found among the declared sources")
            self.logger.warning("No signatures found; nothing to verify")
        else:
            self.logger.debug(
                "Resolved %d triple(s) in %s mode",
                len(plan.triples),
                "automatic" if plan.automatic else "explicit",
            )

        return PlanOutcome(
            classified=classified,
            default_keyring=plan.default_keyring,
            triples=plan.triples,
            automatic=plan.automatic,
        )

    def _resolve_config(
        self, sources: Sequence[SourceFile], config_path: Path | None
    ) -> SrcVerifyConfig:
        if self._config is not None:
            return self._config
        if config_path is None:
            config_path = sources[0].path.parent if sources else Path.cwd()
        return load_config(config_path)


__all__ = ["Orchestrator", "PlanOutcome", "VerifyOutcome"]

"""Coordinator report engine.

Reads one session per requested source, compares what the agents said and
produces a ``Report`` with findings, a verdict and next actions. A source
that cannot be read is recorded as a finding; it never aborts the report.
"""

import logging
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from agent_bridge.adapters.registry import AdapterRegistry, parse_agent
from agent_bridge.errors import BridgeError
from agent_bridge.models import Agent, SessionRecord

logger = logging.getLogger(__name__)

COMPARE_TASK = "Compare agent outputs"
COMPARE_SUCCESS_CRITERIA = [
    "Identify agreements and contradictions",
    "Highlight unavailable sources",
]

SHORT_ID_LENGTH = 8


class Severity(str, Enum):
    """Finding priority, P0 highest. P0 is reserved."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"


class Mode(str, Enum):
    """What the caller wants the report to do."""

    VERIFY = "verify"
    STEER = "steer"
    ANALYZE = "analyze"
    FEEDBACK = "feedback"


class Verdict(str, Enum):
    """Top-line outcome of a report."""

    PASS = "PASS"
    FAIL = "FAIL"
    INCOMPLETE = "INCOMPLETE"
    STEERING_PLAN_READY = "STEERING_PLAN_READY"
    ANALYSIS_COMPLETE = "ANALYSIS_COMPLETE"
    FEEDBACK_COMPLETE = "FEEDBACK_COMPLETE"


class SourceSpec(BaseModel):
    """One agent session a report should read.

    Either ``session_id`` (substring of the file path) or
    ``current_session=True`` (newest session for the cwd) must be given.
    When both are set, ``session_id`` wins and ``current_session`` is ignored.
    """

    agent: Agent
    session_id: str | None = None
    current_session: bool = False
    cwd: str | None = None
    chats_dir: str | None = None

    @model_validator(mode="after")
    def check_selector(self) -> "SourceSpec":
        if not self.session_id and not self.current_session:
            raise ValueError("Each source must provide session_id or set current_session=true")
        return self


class Finding(BaseModel):
    severity: Severity
    summary: str
    evidence: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)


class ReportRequest(BaseModel):
    """Validated input for ``build_report``."""

    mode: Mode
    task: str
    success_criteria: list[str]
    sources: list[SourceSpec]
    constraints: list[str] = Field(default_factory=list)
    normalize: bool = False


class Report(BaseModel):
    """Structured coordinator output, serialized as-is for ``--json``."""

    mode: Mode
    task: str
    success_criteria: list[str]
    sources_used: list[str] = Field(default_factory=list)
    verdict: Verdict
    findings: list[Finding] = Field(default_factory=list)
    recommended_next_actions: list[str] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list)


def parse_source_arg(raw: str) -> SourceSpec:
    """Parse a command-line ``agent[:session_id]`` source.

    Without an id the source targets the current (newest) session.

    Raises:
        UnsupportedAgentError: If the agent name is unknown.
    """
    agent_name, _, session_id = raw.partition(":")
    agent = parse_agent(agent_name)
    session_id = session_id.strip()
    if session_id:
        return SourceSpec(agent=agent, session_id=session_id)
    return SourceSpec(agent=agent, current_session=True)


def compare_request(sources: list[SourceSpec], normalize: bool = False) -> ReportRequest:
    """The fixed analyze-mode request behind ``bridge compare``."""
    return ReportRequest(
        mode=Mode.ANALYZE,
        task=COMPARE_TASK,
        success_criteria=list(COMPARE_SUCCESS_CRITERIA),
        sources=sources,
        normalize=normalize,
    )


def evidence_tag(source: SourceSpec) -> str:
    """Compact ``[agent:id8]`` citation; ``latest`` when no id was given."""
    if source.session_id:
        short_id = source.session_id[:SHORT_ID_LENGTH]
    else:
        short_id = "latest"
    return f"[{source.agent.value}:{short_id}]"


def normalize_content(text: str) -> str:
    """Collapse every whitespace run to a single space."""
    return " ".join(text.split())


def compute_verdict(mode: Mode, missing_count: int, distinct_count: int, success_count: int) -> Verdict:
    if success_count == 0:
        return Verdict.INCOMPLETE
    if mode == Mode.VERIFY:
        if missing_count == 0 and distinct_count <= 1:
            return Verdict.PASS
        return Verdict.FAIL
    if mode == Mode.STEER:
        return Verdict.STEERING_PLAN_READY
    if mode == Mode.ANALYZE:
        return Verdict.ANALYSIS_COMPLETE
    return Verdict.FEEDBACK_COMPLETE


def read_source(source: SourceSpec, default_cwd: str, registry: AdapterRegistry) -> SessionRecord:
    """Read the single latest turn of one source.

    Raises:
        BridgeError: If the source cannot be resolved or parsed.
    """
    adapter = registry.get(source.agent)
    return adapter.read_session(
        source.session_id,
        source.cwd or default_cwd,
        source.chats_dir,
        last_n=1,
    )


def build_report(request: ReportRequest, default_cwd: str, registry: AdapterRegistry) -> Report:
    """Read every source in ``request`` and assemble the coordinator report.

    Args:
        request: Validated report request.
        default_cwd: Scope for sources that carry no cwd of their own.
        registry: Adapters to read sources with.

    Returns:
        Report; unreadable sources appear as P1 findings and open questions.
    """
    successful: list[tuple[SourceSpec, SessionRecord, str]] = []
    missing: list[tuple[SourceSpec, str, str]] = []

    for source in request.sources:
        evidence = evidence_tag(source)
        try:
            record = read_source(source, default_cwd, registry)
        except (BridgeError, OSError) as e:
            logger.warning("Source %s unavailable: %s", evidence, e)
            missing.append((source, str(e), evidence))
            continue
        successful.append((source, record, evidence))

    findings: list[Finding] = []

    for source, error, evidence in missing:
        findings.append(
            Finding(
                severity=Severity.P1,
                summary=f"Source unavailable: {source.agent.value} ({error})",
                evidence=[evidence],
                confidence=0.9,
            )
        )

    for _, record, evidence in successful:
        for warning in record.warnings:
            findings.append(
                Finding(
                    severity=Severity.P2,
                    summary=f"Source warning: {warning}",
                    evidence=[evidence],
                    confidence=0.75,
                )
            )

    distinct_contents = {_comparable(record.content, request.normalize) for _, record, _ in successful}
    all_evidence = [evidence for _, _, evidence in successful]

    if len(successful) >= 2:
        if len(distinct_contents) > 1:
            findings.append(
                Finding(
                    severity=Severity.P1,
                    summary="Divergent agent outputs detected",
                    evidence=all_evidence,
                    confidence=0.75,
                )
            )
        else:
            findings.append(
                Finding(
                    severity=Severity.P3,
                    summary="All available agent outputs are aligned",
                    evidence=all_evidence,
                    confidence=0.9,
                )
            )
    else:
        findings.append(
            Finding(
                severity=Severity.P2,
                summary="Insufficient comparable sources",
                evidence=all_evidence,
                confidence=0.5,
            )
        )

    actions: list[str] = []
    if missing:
        actions.append("Provide valid session identifiers or cwd values for unavailable sources.")
    if len(distinct_contents) > 1:
        actions.append("Inspect full transcripts for diverging sources before final decisions.")
    if request.constraints:
        actions.append(f"Verify recommendations against constraints: {'; '.join(request.constraints)}.")
    if not actions:
        actions.append("No immediate action required.")

    return Report(
        mode=request.mode,
        task=request.task,
        success_criteria=request.success_criteria,
        sources_used=[f"{evidence} {record.source}" for _, record, evidence in successful],
        verdict=compute_verdict(request.mode, len(missing), len(distinct_contents), len(successful)),
        findings=findings,
        recommended_next_actions=actions,
        open_questions=[f"Missing source {source.agent.value}: {error}" for source, error, _ in missing],
    )


def _comparable(content: str, normalize: bool) -> str:
    text = content.strip()
    return normalize_content(text) if normalize else text


def report_to_markdown(report: Report) -> str:
    """Render a report as the markdown block printed by compare and report."""
    lines = [
        "### Agent Bridge Coordinator Report",
        "",
        f"**Mode:** {report.mode.value}",
        f"**Task:** {report.task}",
        "**Success Criteria:**",
    ]
    lines.extend(f"- {criterion}" for criterion in report.success_criteria)

    lines += ["", "**Sources Used:**"]
    lines.extend(f"- {source}" for source in report.sources_used)

    lines += ["", f"**Verdict:** {report.verdict.value}", "", "**Findings:**"]
    for finding in report.findings:
        lines.append(
            f"- **{finding.severity.value}:** {finding.summary} "
            f"(evidence: {', '.join(finding.evidence)}; confidence: {finding.confidence:.2f})"
        )

    lines += ["", "**Recommended Next Actions:**"]
    lines.extend(f"{index}. {action}" for index, action in enumerate(report.recommended_next_actions, start=1))

    if report.open_questions:
        lines += ["", "**Open Questions:**"]
        lines.extend(f"- {question}" for question in report.open_questions)

    return "\n".join(lines)

"""
Deal Assistant Session

The application state of one dashboard session, owned in one place:
- Raw CRM rows (RowStore) and the AI-derived deals (DealModel)
- The dashboard analysis (title, summary, KPIs, charts)
- The latest transcript analysis and its pending suggestions
- Loading flags and user-facing error messages
- A session audit log of ingestion, inference and review events

Flow:
1. ingest_csv: parse a CRM export and tag every row with its row id
2. analyze_dashboard: infer KPIs, charts and deals from the tagged rows
3. analyze_transcripts: compare meeting transcripts with the current deals
4. accept / reject: merge or discard each suggestion
5. reset: return to the empty state

Every analysis captures the session generation when it starts. reset() bumps
the generation, so results of calls still in flight are discarded instead of
overwriting the fresh state.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from ..core.deal_model import DealModel
from ..core.entities import Deal, Row
from ..core.log import get_logger
from ..core.row_store import RowStore
from ..errors import (
    AnalysisInProgress,
    DealModelNotReady,
    InferenceError,
    StateError,
)
from ..layers.data_ingestion.event_schema import EventBuilder, EventStore
from ..layers.data_ingestion.ingestors import CrmExportIngestor, TranscriptIngestor
from ..layers.intelligence.gateway import InferenceGateway
from ..layers.intelligence.schemas import (
    Chart,
    CreationSuggestion,
    DashboardAnalysis,
    Kpi,
    MeetingAnalysis,
    Suggestion,
    TranscriptAnalysis,
    UpdateSuggestion,
)
from ..layers.orchestration.reconciliation import (
    DecisionStatus,
    ReconciliationEngine,
    ReconciliationOutcome,
)
from ..layers.orchestration.suggestion_set import SuggestionSet

logger = get_logger(__name__)


@dataclass
class DashboardView:
    """The installed dashboard analysis, without its deals."""
    analysis_title: str
    summary: str = ""
    kpis: list[Kpi] = field(default_factory=list)
    charts: list[Chart] = field(default_factory=list)


@dataclass
class TranscriptView:
    """The installed transcript analysis, without its suggestions."""
    analysis_title: str = ""
    overall_summary: str = ""
    meetings: list[MeetingAnalysis] = field(default_factory=list)


@dataclass
class DealDetail:
    """A deal next to the raw CRM row it was derived from."""
    deal: Deal
    row: Row


class DealAssistantSession:
    """
    App-state aggregate for the AI CRM dashboard.

    Args:
        gateway: InferenceGateway (optional, built from settings by default)
        event_store: EventStore for the session audit log (optional)
    """

    def __init__(
        self,
        gateway: InferenceGateway = None,
        event_store: EventStore = None
    ):
        self._gateway = gateway if gateway is not None else InferenceGateway()
        self.events = event_store if event_store is not None else EventStore()
        self._csv_ingestor = CrmExportIngestor()
        self._transcript_ingestor = TranscriptIngestor()
        # One set per session: its id counter must never restart
        self.suggestions = SuggestionSet()
        self._generation = 0
        self._clear()

    def _clear(self) -> None:
        self.file_name = ""
        self.rows: Optional[RowStore] = None
        self.deals: Optional[DealModel] = None
        self.dashboard: Optional[DashboardView] = None
        self.suggestions.initialize((), ())
        self.transcript_analysis: Optional[TranscriptView] = None

        self.is_loading = False
        self.is_analyzing_transcript = False
        self.error: Optional[str] = None
        self.transcript_error: Optional[str] = None

        self._table_text = ""
        self._last_transcript = ""

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_busy(self) -> bool:
        return self.is_loading or self.is_analyzing_transcript

    # -------------------------------------------------------------------------
    # Ingestion
    # -------------------------------------------------------------------------

    def ingest_csv(self, csv_text: str, file_name: str = "") -> str:
        """
        Load a CRM export, replacing any previous data.

        Returns the id-annotated CSV text that analyze_dashboard sends.
        A parse failure leaves the current state untouched; otherwise any
        analysis still in flight becomes stale.
        """
        return self._install_rows(self._csv_ingestor.ingest(csv_text), file_name)

    def load_csv_file(self, path: Union[str, Path]) -> str:
        path = Path(path)
        return self._install_rows(self._csv_ingestor.ingest_file(path), path.name)

    def _install_rows(self, raw_rows: list[Row], file_name: str) -> str:
        self._generation += 1
        self._clear()
        self.file_name = file_name
        self.rows = RowStore.ingest(raw_rows)
        self._table_text = self.rows.to_csv()

        self.events.append(
            EventBuilder()
            .ingestion("csv_ingested")
            .with_payload({"file_name": file_name, "rows": len(self.rows)})
            .by_system("deal_assistant")
            .build()
        )
        return self._table_text

    def load_transcripts(self, paths: Iterable[Union[str, Path]]) -> str:
        """Extract and combine transcript files into one text."""
        combined = self._transcript_ingestor.ingest(Path(p) for p in paths)
        self.events.append(
            EventBuilder()
            .ingestion("transcripts_loaded")
            .with_payload({"characters": len(combined)})
            .by_system("deal_assistant")
            .build()
        )
        return combined

    # -------------------------------------------------------------------------
    # Analyses
    # -------------------------------------------------------------------------

    async def analyze_dashboard(self) -> bool:
        """
        Run the dashboard analysis on the ingested rows.

        On success the dashboard and deal model are installed. On failure the
        message is stored in `error` and False is returned; retrying re-issues
        the same request.
        """
        if self.rows is None:
            raise StateError("No CRM data has been ingested")
        self._ensure_idle()

        generation = self._generation
        self.is_loading = True
        self.error = None
        self.dashboard = None
        self.deals = None
        self.suggestions.initialize((), ())
        self.transcript_analysis = None
        self.transcript_error = None

        try:
            analysis = await self._gateway.analyze_source(self._table_text)
        except InferenceError as e:
            if self._is_current(generation, "dashboard"):
                self.error = (
                    f"Failed to analyze data. {str(e).rstrip('.')}. "
                    "Please ensure the CSV is valid and try again."
                )
                self._record_inference("dashboard_failed", {"error": type(e).__name__})
            return False
        finally:
            # Also on cancellation; a newer generation owns its own flags
            if generation == self._generation:
                self.is_loading = False

        if not self._is_current(generation, "dashboard"):
            return False

        self._install_dashboard(analysis)
        return True

    def _install_dashboard(self, analysis: DashboardAnalysis) -> None:
        self.deals = DealModel(record.to_deal() for record in analysis.deals)
        self.dashboard = DashboardView(
            analysis_title=analysis.analysis_title,
            summary=analysis.summary,
            kpis=list(analysis.kpis),
            charts=list(analysis.charts)
        )

        orphans = [deal.row_id for deal in self.deals if self.rows.lookup(deal.row_id) is None]
        if orphans:
            logger.warning("deals_without_rows", row_ids=orphans)

        self._record_inference("dashboard_installed", {
            "deals": len(self.deals),
            "kpis": len(analysis.kpis),
            "charts": len(analysis.charts)
        })

    async def analyze_transcripts(self, transcript: str) -> bool:
        """
        Analyze meeting transcripts against the current deals.

        Requires a successful dashboard analysis. Previous transcript results
        and pending suggestions are cleared when the call starts.
        """
        if self.deals is None:
            raise DealModelNotReady("Analyze a CRM export before analyzing transcripts")
        self._ensure_idle()

        generation = self._generation
        self.is_analyzing_transcript = True
        self.transcript_error = None
        self.transcript_analysis = None
        self.suggestions.initialize((), ())
        self._last_transcript = transcript

        try:
            analysis = await self._gateway.analyze_transcripts(transcript, list(self.deals))
        except InferenceError as e:
            if self._is_current(generation, "transcripts"):
                self.transcript_error = f"Failed to analyze transcript: {e}"
                self._record_inference("transcripts_failed", {"error": type(e).__name__})
            return False
        finally:
            if generation == self._generation:
                self.is_analyzing_transcript = False

        if not self._is_current(generation, "transcripts"):
            return False

        self._install_transcripts(analysis)
        return True

    async def retry_transcripts(self) -> bool:
        """Re-issue the last transcript analysis."""
        return await self.analyze_transcripts(self._last_transcript)

    def _install_transcripts(self, analysis: TranscriptAnalysis) -> None:
        self.suggestions.initialize(analysis.updates, analysis.creations)
        self.transcript_analysis = TranscriptView(
            analysis_title=analysis.analysis_title,
            overall_summary=analysis.overall_summary,
            meetings=list(analysis.meetings)
        )
        self._record_inference("transcripts_installed", {
            "meetings": len(analysis.meetings),
            "updates": len(self.suggestions.updates),
            "creations": len(self.suggestions.creations)
        })

    def _is_current(self, generation: int, operation: str) -> bool:
        if generation == self._generation:
            return True
        logger.info("stale_result_discarded", operation=operation, generation=generation)
        return False

    def _ensure_idle(self) -> None:
        if self.is_busy:
            raise AnalysisInProgress("An analysis is already running")

    def _record_inference(self, event_type: str, payload: dict) -> None:
        self.events.append(
            EventBuilder()
            .inference(event_type)
            .with_payload(payload)
            .by_system("inference_gateway")
            .build()
        )

    # -------------------------------------------------------------------------
    # Review
    # -------------------------------------------------------------------------

    def accept(self, suggestion: Suggestion, user_id: str = None) -> ReconciliationOutcome:
        return self._decide(suggestion, user_id, accept=True)

    def reject(self, suggestion: Suggestion, user_id: str = None) -> ReconciliationOutcome:
        return self._decide(suggestion, user_id, accept=False)

    def _decide(self, suggestion: Suggestion, user_id: Optional[str], accept: bool) -> ReconciliationOutcome:
        if self.deals is None or self.rows is None:
            kind = "update" if isinstance(suggestion, UpdateSuggestion) else "create"
            return ReconciliationOutcome(
                DecisionStatus.SKIPPED,
                kind,
                row_id=getattr(suggestion, "row_id", None),
                suggestion_id=getattr(suggestion, "suggestion_id", None)
            )

        engine = ReconciliationEngine(self.deals, self.rows, self.suggestions, self.events)
        if accept:
            return engine.accept(suggestion, user_id)
        return engine.reject(suggestion, user_id)

    @property
    def pending_updates(self) -> list[UpdateSuggestion]:
        return self.suggestions.updates

    @property
    def pending_creations(self) -> list[CreationSuggestion]:
        return self.suggestions.creations

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def deal_detail(self, row_id: int) -> Optional[DealDetail]:
        """The deal with its raw row, or a placeholder row if that is missing."""
        if self.deals is None or self.rows is None:
            return None
        deal = self.deals.get(row_id)
        if deal is None:
            return None
        return DealDetail(deal=deal, row=self.rows.find_or_placeholder(row_id))

    def display_rows(self) -> list[Row]:
        return self.rows.display_rows() if self.rows is not None else []

    def display_columns(self) -> list[str]:
        return self.rows.columns() if self.rows is not None else []

    def dashboard_payload(self) -> Optional[dict]:
        """The dashboard with the current deals, in wire format."""
        if self.dashboard is None or self.deals is None:
            return None
        return {
            "analysisTitle": self.dashboard.analysis_title,
            "summary": self.dashboard.summary,
            "kpis": [kpi.to_wire() for kpi in self.dashboard.kpis],
            "charts": [chart.to_wire() for chart in self.dashboard.charts],
            "deals": self.deals.snapshot()
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Back to the empty state. In-flight results become stale."""
        self._generation += 1
        self._clear()
        self.events.clear()
        logger.info("session_reset", generation=self._generation)

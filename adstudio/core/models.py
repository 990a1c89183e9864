"""
Pydantic models for the AdStudio REST API

Every backend response is wrapped in the envelope {code, message?, data?}
where code == 0 signals success. Request models are serialized with
exclude_none so unset optional fields are omitted from the JSON body.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

CreativeId = Union[int, str]


# ============================================================================
# Envelope
# ============================================================================

class ApiResponse(BaseModel, Generic[T]):
    """Backend response envelope"""
    code: int
    message: Optional[str] = None
    data: Optional[T] = None

    @property
    def ok(self) -> bool:
        return self.code == 0


# ============================================================================
# Enums
# ============================================================================

class TaskStatus(str, Enum):
    """Lifecycle of a creative generation task"""
    PENDING = "pending"
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED)


class LanguageOption(str, Enum):
    """Output language for generated copywriting"""
    AUTO = "auto"
    ZH = "zh"
    EN = "en"


class ExperimentStatus(str, Enum):
    """Experiment states accepted by /experiments/{id}/status"""
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"


# ============================================================================
# Creative tasks
# ============================================================================

class TaskData(BaseModel):
    """Reference to a task returned by write operations"""
    task_id: str
    status: Optional[TaskStatus] = None


class CreativeData(BaseModel):
    """A generated creative inside a task detail"""
    id: str
    format: str
    image_url: str
    width: int = 0
    height: int = 0
    title: Optional[str] = None
    product_name: Optional[str] = None
    cta_text: Optional[str] = None
    selling_points: Optional[List[str]] = None


class TaskDetail(BaseModel):
    """Full task record from GET /creative/task/{id}"""
    task_id: str
    status: TaskStatus
    title: str = ""
    progress: int = Field(default=0, ge=0, le=100)
    error: Optional[str] = None
    creatives: List[CreativeData] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    selling_points: Optional[List[str]] = None
    product_image_url: Optional[str] = None
    requested_formats: Optional[List[str]] = None
    style: Optional[str] = None
    cta_text: Optional[str] = None
    num_variants: Optional[int] = None
    product_name: Optional[str] = None


class TaskListItem(BaseModel):
    """Row of GET /creative/tasks"""
    id: str
    title: str = ""
    status: TaskStatus
    progress: int = 0
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    product_name: Optional[str] = None
    cta_text: Optional[str] = None
    selling_points: Optional[List[str]] = None
    first_image: Optional[str] = None


class TaskList(BaseModel):
    tasks: List[TaskListItem] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0
    total_pages: int = 0


class DeleteTaskResult(BaseModel):
    task_id: str
    status: str


class Asset(BaseModel):
    """Stored creative asset from GET /creative/assets"""
    id: str
    numeric_id: Optional[int] = None
    task_id: Optional[CreativeId] = None
    format: str = ""
    width: int = 0
    height: int = 0
    file_size: Optional[int] = None
    storage_type: str = ""
    public_url: str = ""
    image_url: Optional[str] = None
    style: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    title: Optional[str] = None
    product_name: Optional[str] = None
    cta_text: Optional[str] = None
    selling_points: Optional[List[str]] = None


class AssetList(BaseModel):
    assets: List[Asset] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0
    total_pages: int = 0


# ============================================================================
# Requests
# ============================================================================

class GenerateRequest(BaseModel):
    """Legacy single-shot generation request (POST /creative/generate)"""
    title: str
    selling_points: List[str]
    product_image_url: Optional[str] = None
    requested_formats: List[str] = Field(default_factory=lambda: ["1:1"])
    style: Optional[str] = None
    cta_text: Optional[str] = None
    num_variants: int = Field(default=2, ge=1)


class GenerateCopywritingRequest(BaseModel):
    product_name: str
    language: Optional[LanguageOption] = None


class CopywritingCandidates(BaseModel):
    """Candidate CTAs and selling points produced for a product"""
    task_id: str
    cta_candidates: List[str] = Field(default_factory=list)
    selling_point_candidates: List[str] = Field(default_factory=list)


class VariantConfig(BaseModel):
    """Per-variant image settings; unset fields fall back to the global config"""
    style: Optional[str] = None
    prompt: Optional[str] = None


class ConfirmCopywritingRequest(BaseModel):
    task_id: str
    selected_cta_index: int
    selected_sp_indexes: List[int]
    edited_cta: Optional[str] = None
    edited_sps: Optional[List[str]] = None
    product_image_url: Optional[str] = None
    style: Optional[str] = None
    num_variants: Optional[int] = None
    formats: Optional[List[str]] = None
    variant_configs: Optional[List[VariantConfig]] = None


class StartCreativeRequest(BaseModel):
    task_id: str
    product_image_url: Optional[str] = None
    style: Optional[str] = None
    num_variants: Optional[int] = None
    formats: Optional[List[str]] = None
    variant_configs: Optional[List[VariantConfig]] = None


# ============================================================================
# Experiments
# ============================================================================

class CreativeDefaults(BaseModel):
    """CTA and selling points stored on a creative/asset record"""
    cta_text: Optional[str] = None
    selling_points: List[str] = Field(default_factory=list)


class ExperimentVariant(BaseModel):
    """
    One creative alternative within an experiment.

    On the wire the overrides travel as cta_text / selling_points.
    """
    model_config = ConfigDict(populate_by_name=True)

    creative_id: CreativeId
    weight: float = 0.5
    cta_override: Optional[str] = Field(default=None, alias="cta_text")
    selling_points_override: Optional[List[str]] = Field(default=None, alias="selling_points")
    bucket_start: Optional[int] = None
    bucket_end: Optional[int] = None
    title: Optional[str] = None
    product_name: Optional[str] = None
    image_url: Optional[str] = None


class Experiment(BaseModel):
    experiment_id: str
    name: str
    product_name: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    variants: List[ExperimentVariant] = Field(default_factory=list)


class ExperimentList(BaseModel):
    experiments: List[Experiment] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0


class ExperimentCreated(BaseModel):
    experiment_id: str
    status: str


class ExperimentAssignment(BaseModel):
    """Variant served to a user key (bucketing happens server-side)"""
    creative_id: CreativeId
    asset_uuid: Optional[str] = None
    task_id: Optional[CreativeId] = None
    title: Optional[str] = None
    product_name: Optional[str] = None
    cta_text: Optional[str] = None
    selling_points: Optional[List[str]] = None
    image_url: Optional[str] = None


class VariantMetrics(BaseModel):
    """Raw counters for one variant"""
    creative_id: CreativeId
    impressions: int = Field(default=0, ge=0)
    clicks: int = Field(default=0, ge=0)
    ctr: Optional[float] = None


class ExperimentMetrics(BaseModel):
    experiment_id: str
    variants: List[VariantMetrics] = Field(default_factory=list)


# ============================================================================
# Traces
# ============================================================================

class TraceStep(BaseModel):
    step_name: str
    component: str = ""
    status: str
    duration_ms: int = 0
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    input_preview: Optional[str] = None
    output_preview: Optional[str] = None
    error_message: Optional[str] = None


class TraceItem(BaseModel):
    trace_id: str
    model_name: str = ""
    model_version: str = ""
    status: str
    duration_ms: int = 0
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    source: Optional[str] = None
    input_preview: Optional[str] = None
    output_preview: Optional[str] = None
    error_message: Optional[str] = None
    steps: List[TraceStep] = Field(default_factory=list)


class TraceList(BaseModel):
    traces: List[TraceItem] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0


# ============================================================================
# Warmup
# ============================================================================

class WarmupRecord(BaseModel):
    started_at: Optional[datetime] = None
    duration: int = 0  # milliseconds
    success: bool = False
    errors: List[str] = Field(default_factory=list)
    actions_run: List[str] = Field(default_factory=list)


class WarmupStats(BaseModel):
    runs: int = 0
    successes: int = 0
    failures: int = 0
    last_run: Optional[datetime] = None
    last_success: Optional[datetime] = None
    last_error: Optional[str] = None
    recent: List[WarmupRecord] = Field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Share of successful runs in percent"""
        if self.runs <= 0:
            return 0.0
        return self.successes / self.runs * 100


def dump_request(model: BaseModel) -> Dict[str, Any]:
    """Serialize a request model the way the backend expects it."""
    return model.model_dump(mode="json", exclude_none=True, by_alias=True)

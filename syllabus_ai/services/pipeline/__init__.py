from syllabus_ai.services.pipeline.syllabus_pipeline import (
    PipelineBatchResult,
    PipelineResult,
    SyllabusPipeline,
)

__all__ = ["PipelineBatchResult", "PipelineResult", "SyllabusPipeline"]

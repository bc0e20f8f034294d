"""Speaking practice pipeline package.

Modules are organised by the order in which ``/api/evaluate`` executes:

1. ``ingestion`` – validate the multipart upload and scenario field.
2. ``transcription`` – speech-to-text with word timestamps.
3. ``evaluation`` – prompt the model and validate the structured evaluation.
4. ``flow`` – chain the two stages with fail-fast semantics.

``scenario`` is the standalone scenario generator used by ``/api/scenario``.
"""

from .evaluation import evaluate_speech
from .flow import run_evaluation_pipeline
from .ingestion import parse_scenario_field, read_audio_upload, resolve_content_type
from .scenario import generate_scenario
from .transcription import transcribe_audio
from .types import AudioUpload

__all__ = [
    "AudioUpload",
    "evaluate_speech",
    "generate_scenario",
    "parse_scenario_field",
    "read_audio_upload",
    "resolve_content_type",
    "run_evaluation_pipeline",
    "transcribe_audio",
]

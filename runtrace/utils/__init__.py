# Utils Package
from runtrace.utils.serialization import ensure_object, ensure_inputs_object, ensure_outputs_object
from runtrace.utils.validation import validate_run

__all__ = ["ensure_object", "ensure_inputs_object", "ensure_outputs_object", "validate_run"]

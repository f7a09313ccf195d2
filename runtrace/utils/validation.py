from runtrace.core.errors import RunValidationError
from runtrace.schemas.run import Run


def validate_run(run: Run) -> None:
    """
    Check a run before it is sent to the collector.

    Raises:
        RunValidationError: empty name or non-object inputs
    """
    if not run.name or not run.name.strip():
        raise RunValidationError("Run name cannot be empty")

    if not isinstance(run.inputs, dict):
        raise RunValidationError("Run inputs must be an object")

from typing import Optional

from pydantic import BaseModel


class Metrics(BaseModel):
    """Token and cost counters attached to a run at finalization."""
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    prompt_cost: Optional[float] = None
    completion_cost: Optional[float] = None
    total_cost: Optional[float] = None

    def with_tokens(self, prompt: int, completion: int) -> "Metrics":
        return self.model_copy(update={
            "prompt_tokens": prompt,
            "completion_tokens": completion,
            "total_tokens": prompt + completion,
        })

    def with_costs(self, prompt: float, completion: float) -> "Metrics":
        return self.model_copy(update={
            "prompt_cost": prompt,
            "completion_cost": completion,
            "total_cost": prompt + completion,
        })

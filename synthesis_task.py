"""
Task description consumed from the surrounding synthesis process
"""

import os
from enum import Enum
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field


class Tag(str, Enum):
    """Descriptive benchmark tags"""
    FOR = "FOR"
    FOREACH = "FOREACH"
    WHILE = "WHILE"
    IF = "IF"
    SINGLE_LINE = "SINGLE_LINE"
    RETURNS = "RETURNS"
    ARRAY = "ARRAY"
    GENERIC = "GENERIC"


class SynthesisTask(BaseModel):
    """Configuration of one synthesis task"""
    name: str = Field(..., description="Task name")
    group: Optional[str] = Field(None, description="Benchmark group label")
    num_examples: int = Field(0, ge=0, description="Number of input/output examples")
    num_components: int = Field(0, ge=0, description="Number of catalog components available")
    tags: List[Tag] = Field(default_factory=list, description="Descriptive tags")
    sypet_mode: bool = Field(False, description="SyPet-style benchmark")


def load_task(path: str) -> SynthesisTask:
    """Load a task description from YAML"""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Could not find task file at {path}")
    with open(path, 'r') as f:
        spec = yaml.safe_load(f) or {}
    return SynthesisTask(**spec)

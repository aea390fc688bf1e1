"""Workflow templates keyed by content type and complexity."""

from dataclasses import dataclass, field


COMPLEXITY_LEVELS = ("simple", "medium", "complex")


@dataclass
class StepTemplate:
    """A step in a generated workflow."""
    key: str
    name: str
    step_type: str  # research, writing, optimization, review, publishing
    estimated_hours: float
    dependencies: list[str] = field(default_factory=list)
    ai_assistance: bool = True
    automation_level: str = "assisted"  # manual, assisted, automated


@dataclass
class WorkflowTemplate:
    name: str
    description: str
    steps: list[StepTemplate] = field(default_factory=list)

    @property
    def total_estimated_hours(self) -> float:
        return sum(step.estimated_hours for step in self.steps)

    def step_rows(self) -> list[dict]:
        """Step fields ready to store; dependencies refer to step names."""
        names = {step.key: step.name for step in self.steps}
        return [
            {
                "name": step.name,
                "description": f"{step.automation_level.capitalize()} step"
                               f"{' with AI assistance' if step.ai_assistance else ''}",
                "step_type": step.step_type,
                "estimated_hours": step.estimated_hours,
                "dependencies": [names[d] for d in step.dependencies],
            }
            for step in self.steps
        ]


def _by_complexity(complexity: str, simple: float, medium: float, complex_: float) -> float:
    return {"simple": simple, "medium": medium, "complex": complex_}[complexity]


def build_smart_workflow(content_type: str, complexity: str = "medium") -> WorkflowTemplate:
    """
    Build the standard six-step content workflow.

    Each step depends on the one before it. Research and writing time
    scale with complexity.

    Raises:
        ValueError: If complexity is not simple, medium or complex
    """
    if complexity not in COMPLEXITY_LEVELS:
        raise ValueError(
            f"Unknown complexity '{complexity}'. Expected one of: {', '.join(COMPLEXITY_LEVELS)}"
        )

    steps = [
        StepTemplate(
            key="research",
            name="Content Research",
            step_type="research",
            estimated_hours=_by_complexity(complexity, 1, 2, 4),
        ),
        StepTemplate(
            key="outline",
            name="Create Outline",
            step_type="writing",
            estimated_hours=1,
            dependencies=["research"],
            automation_level="automated",
        ),
        StepTemplate(
            key="writing",
            name="Content Writing",
            step_type="writing",
            estimated_hours=_by_complexity(complexity, 2, 4, 8),
            dependencies=["outline"],
        ),
        StepTemplate(
            key="seo-optimization",
            name="SEO Optimization",
            step_type="optimization",
            estimated_hours=2,
            dependencies=["writing"],
            automation_level="automated",
        ),
        StepTemplate(
            key="review",
            name="Content Review",
            step_type="review",
            estimated_hours=1,
            dependencies=["seo-optimization"],
            ai_assistance=False,
            automation_level="manual",
        ),
        StepTemplate(
            key="publishing",
            name="Publish Content",
            step_type="publishing",
            estimated_hours=0.5,
            dependencies=["review"],
            automation_level="automated",
        ),
    ]

    return WorkflowTemplate(
        name=f"{content_type} Content Workflow",
        description=f"Automated workflow for creating {content_type} content",
        steps=steps,
    )

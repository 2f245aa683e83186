"""Prompt templates for the LLM collaborators, with optional YAML overrides."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Any, Dict, List, Optional, Union

import yaml


@dataclass
class PromptVariable:
    """Represents a variable in a prompt template."""
    name: str
    description: str
    required: bool = True
    default_value: Optional[Any] = None


@dataclass
class PromptTemplate:
    """Represents a prompt template with variables and metadata."""
    name: str
    template: str
    description: str = ""
    variables: List[PromptVariable] = field(default_factory=list)
    version: str = "1.0"

    def render(self, **kwargs) -> str:
        """Render the template with provided variables."""
        required_vars = {var.name for var in self.variables if var.required}
        missing_required = required_vars - set(kwargs)
        if missing_required:
            raise ValueError(f"Missing required variables: {sorted(missing_required)}")

        render_vars = dict(kwargs)
        for var in self.variables:
            if var.name not in render_vars and var.default_value is not None:
                render_vars[var.name] = var.default_value

        try:
            return Template(self.template).substitute(render_vars)
        except KeyError as e:
            raise ValueError(f"Template rendering failed: missing variable {e}")


class TemplateLoader(ABC):
    """Abstract base class for template loaders."""

    @abstractmethod
    async def load_template(self, template_name: str) -> PromptTemplate:
        """Load a template by name; raises KeyError when absent."""
        pass

    @abstractmethod
    async def list_templates(self) -> List[str]:
        pass


class InMemoryTemplateLoader(TemplateLoader):
    """Templates registered in code."""

    def __init__(self):
        self.templates: Dict[str, PromptTemplate] = {}

    def add_template(self, template: PromptTemplate):
        self.templates[template.name] = template

    async def load_template(self, template_name: str) -> PromptTemplate:
        if template_name not in self.templates:
            raise KeyError(f"Template '{template_name}' not found")
        return self.templates[template_name]

    async def list_templates(self) -> List[str]:
        return list(self.templates.keys())


class FileTemplateLoader(TemplateLoader):
    """
    Load templates from a directory of ``.yaml``/``.yml`` or ``.txt`` files.

    YAML files carry ``template`` plus optional ``description``,
    ``variables`` and ``version`` keys; text files are the template body.
    """

    def __init__(self, templates_dir: Union[str, Path]):
        self.templates_dir = Path(templates_dir)

    async def load_template(self, template_name: str) -> PromptTemplate:
        for ext in (".yaml", ".yml", ".txt"):
            template_path = self.templates_dir / f"{template_name}{ext}"
            if template_path.exists():
                return self._load_from_file(template_path)
        raise KeyError(f"Template '{template_name}' not found in {self.templates_dir}")

    async def list_templates(self) -> List[str]:
        if not self.templates_dir.is_dir():
            return []
        names = {
            path.stem
            for ext in (".yaml", ".yml", ".txt")
            for path in self.templates_dir.glob(f"*{ext}")
        }
        return sorted(names)

    def _load_from_file(self, template_path: Path) -> PromptTemplate:
        content = template_path.read_text(encoding="utf-8")
        if template_path.suffix == ".txt":
            return PromptTemplate(name=template_path.stem, template=content)

        data = yaml.safe_load(content) or {}
        if "template" not in data:
            raise ValueError(f"{template_path} has no 'template' key")
        return PromptTemplate(
            name=template_path.stem,
            template=data["template"],
            description=data.get("description", ""),
            variables=[PromptVariable(**v) for v in data.get("variables", [])],
            version=str(data.get("version", "1.0")),
        )


DATASET_GENERATION = PromptTemplate(
    name="dataset_generation",
    template="""Generate a JSON dataset for an Indian education platform 'EduInsight'.
Create $school_count School level teachers and $university_count University level teachers.
Each teacher needs an id, name, subject, category and a syllabus of 6-12 units.
Create $feedback_per_teacher pieces of anonymous student feedback per teacher with:
teacherId, numericRating (1-10), comment, sentimentScore (-1.0 to 1.0),
topics (short labels such as Clarity, Pace, Engagement), isFlagged (true only
when the comment needs human intervention) and an ISO-8601 timestamp.
Return ONLY JSON.""",
    description="Synthetic teachers and feedback for the dashboard",
    variables=[
        PromptVariable("school_count", "Number of School level teachers", False, 2),
        PromptVariable("university_count", "Number of University level teachers", False, 2),
        PromptVariable("feedback_per_teacher", "Feedback entries per teacher", False, 3),
    ],
)

FEEDBACK_ANALYSIS = PromptTemplate(
    name="feedback_analysis",
    template="""Analyze this student feedback about a teacher.
Rating: $rating/10. Comment: "$comment".
Return JSON with sentimentScore (-1.0 to 1.0), topics (1-3 short labels)
and isFlagged (true if the comment describes abuse, safety issues or
anything else needing intervention).""",
    description="Sentiment, topics and intervention flag for one comment",
    variables=[
        PromptVariable("rating", "Numeric rating 1-10"),
        PromptVariable("comment", "Free text comment"),
    ],
)

TEACHER_INSIGHT = PromptTemplate(
    name="teacher_insight",
    template="""Summarize teacher performance for $teacher_name ($subject) based on these student comments: $comments.
Max 2 sentences.""",
    description="Short narrative summary of a teacher's feedback",
    variables=[
        PromptVariable("teacher_name", "Teacher display name"),
        PromptVariable("subject", "Subject taught", False, "their subject"),
        PromptVariable("comments", "Joined feedback comments"),
    ],
)


class TemplateManager:
    """Resolves templates from an optional override loader, then the built-ins."""

    def __init__(self, override_loader: Optional[TemplateLoader] = None):
        self.builtin_loader = InMemoryTemplateLoader()
        self.override_loader = override_loader
        self.template_cache: Dict[str, PromptTemplate] = {}

        for template in (DATASET_GENERATION, FEEDBACK_ANALYSIS, TEACHER_INSIGHT):
            self.builtin_loader.add_template(template)

    async def get_template(self, template_name: str) -> PromptTemplate:
        if template_name in self.template_cache:
            return self.template_cache[template_name]

        template = None
        if self.override_loader is not None:
            try:
                template = await self.override_loader.load_template(template_name)
            except KeyError:
                template = None
        if template is None:
            template = await self.builtin_loader.load_template(template_name)

        self.template_cache[template_name] = template
        return template

    async def render_template(self, template_name: str, variables: Dict[str, Any]) -> str:
        template = await self.get_template(template_name)
        return template.render(**variables)


# Global template manager instance
_global_template_manager: Optional[TemplateManager] = None


def get_template_manager() -> TemplateManager:
    """Get the global template manager instance."""
    global _global_template_manager
    if _global_template_manager is None:
        _global_template_manager = TemplateManager()
    return _global_template_manager


def set_template_manager(manager: Optional[TemplateManager]):
    """Set (or reset, with None) the global template manager instance."""
    global _global_template_manager
    _global_template_manager = manager

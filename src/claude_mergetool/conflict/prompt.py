"""Prompt composition for the external resolver.

Both prompts are plain ``str.format`` templates, so they can be
overridden from YAML under ``prompts:``. Rendering is a pure function
of the ConflictContext: same context, same bytes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from claude_mergetool.conflict.context import ConflictContext

DEFAULT_SYSTEM_TEMPLATE = (
    "You are resolving a merge conflict in `{filepath}`. "
    "Your working directory is the root of the repository, so you can "
    "browse and edit other files if needed (e.g. if code moved between "
    "files).\n\n"
    "Three versions of the file are provided as temporary files: "
    "the base{base_label}, left ({left_label}), and right "
    "({right_label}). Read all three, understand what each side changed "
    "relative to the base, and write a resolved version to the output "
    "path. If changes are compatible, merge them cleanly. If they "
    "genuinely conflict, use your best judgment and explain your "
    "reasoning."
)

DEFAULT_USER_TEMPLATE = (
    "Resolve the merge conflict in `{filepath}`.\n\n"
    "Read these three versions of the file:\n"
    "- Base{base_label}: {base}\n"
    "- Left ({left_label}): {left}\n"
    "- Right ({right_label}): {right}\n\n"
    "{marker_note}"
    "Write the resolved file to: {destination}"
)


class ResolverPrompt(BaseModel):
    """The two texts handed to the resolver."""

    model_config = ConfigDict(frozen=True)

    system: str
    user: str


class PromptComposer:
    """Renders system and user prompts for one conflict.

    Args:
        system_template: Template for the appended system prompt
        user_template: Template for the task prompt
        extra_system_prompt: Appended to the system prompt after a
            blank line, when set
    """

    def __init__(
        self,
        system_template: str = DEFAULT_SYSTEM_TEMPLATE,
        user_template: str = DEFAULT_USER_TEMPLATE,
        extra_system_prompt: str | None = None,
    ):
        self.system_template = system_template
        self.user_template = user_template
        self.extra_system_prompt = extra_system_prompt

    @staticmethod
    def fields(context: ConflictContext) -> dict[str, str]:
        """Template fields for a context.

        ``base_label`` is `` (LABEL)`` or empty; with no base label the
        prompt never names the base version by anything but "base".
        """
        labels = context.labels
        marker_note = ""
        if context.marker_size is not None:
            marker_note = (
                f"Conflict markers in this file are "
                f"{context.marker_size} characters long.\n\n"
            )
        return {
            "filepath": context.display_path,
            "base": str(context.base.path),
            "left": str(context.left.path),
            "right": str(context.right.path),
            "base_label": f" ({labels.base})" if labels.base else "",
            "left_label": labels.left,
            "right_label": labels.right,
            "marker_note": marker_note,
            "destination": str(context.destination),
        }

    def compose(self, context: ConflictContext) -> ResolverPrompt:
        fields = self.fields(context)
        system = self.system_template.format(**fields)
        if self.extra_system_prompt:
            system = f"{system}\n\n{self.extra_system_prompt}"
        return ResolverPrompt(
            system=system,
            user=self.user_template.format(**fields),
        )

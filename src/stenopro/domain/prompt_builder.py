"""Assembles the text sent to the correction model."""

from pathlib import Path

from stenopro.domain.models import GlossaryTerm

END_MARKER = "(Fim da transcrição)"

FALLBACK_PROMPT_PATH = (
    Path(__file__).resolve().parent.parent / "prompts" / "fallback_system_prompt.txt"
)


def load_fallback_prompt(path: Path = FALLBACK_PROMPT_PATH) -> str:
    """Reads the bundled revision instructions used when no prompt is active."""
    return path.read_text(encoding="utf-8").strip()


class CorrectionPromptBuilder:
    """Builds correction prompts from a system prompt, raw text and glossary."""

    def __init__(self, fallback_prompt: str):
        self._fallback_prompt = fallback_prompt

    def resolve_system_prompt(
        self, custom_prompt: str | None, active_prompt: str | None
    ) -> str:
        """
        Picks the instructions for one correction run.

        The record's own custom prompt wins, then the currently active system
        prompt, then the bundled fallback. Blank values count as absent.
        """
        for candidate in (custom_prompt, active_prompt):
            if candidate and candidate.strip():
                return candidate
        return self._fallback_prompt

    def format_glossary(self, terms: list[GlossaryTerm]) -> str:
        """One ``name - info`` line per term; empty string when there are none."""
        return "\n".join(f"{term.name} - {term.info or ''}" for term in terms)

    def build(self, system_prompt: str, raw_text: str, glossary: str) -> str:
        """
        Concatenates the full correction prompt.

        Args:
            system_prompt: Revision instructions.
            raw_text: Speech-to-text output to be corrected.
            glossary: Pre-formatted glossary block, omitted when empty.

        Returns:
            The prompt, ending with the task instructions and end marker.
        """
        sections = [system_prompt, f"# TRANSCRIÇÃO BRUTA:\n{raw_text}"]

        if glossary:
            sections.append(
                "# GLOSSÁRIO (consultar para grafia correta dos nomes):\n" + glossary
            )

        task = [
            "# TAREFA:",
            "Revise e corrija o texto da TRANSCRIÇÃO BRUTA acima seguindo "
            "RIGOROSAMENTE as instruções de formatação.",
        ]
        if glossary:
            task.append("Use o GLOSSÁRIO para garantir a grafia correta dos nomes.")
        task.append("Retorne APENAS o texto formatado, sem comentários adicionais.")
        task.append(f"Marque o final com: {END_MARKER}")
        sections.append("\n".join(task))

        return "\n\n".join(sections)

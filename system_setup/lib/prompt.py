from __future__ import annotations


def confirm_action(prompt: str, default: bool = False) -> bool:
    """Ask a yes/no question on the terminal. EOF counts as the default."""

    suffix = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{prompt} {suffix}: ").strip().lower()
    except EOFError:
        return default
    if not answer:
        return default
    return answer.startswith("y")

"""Prompt templates for the copy review strategies."""

TERMINATION_TEMPLATE = """Determine if the copy has been approved.  If so, respond with a single word: yes

History:
{{$history}}"""


def build_selection_template(writer_name: str, reviewer_name: str) -> str:
    """
    Selection prompt alternating between the writer and the reviewer.

    `{{$agents}}` is filled with the roster and `{{$history}}` with the
    reduced history at evaluation time.
    """
    return f"""Determine which participant takes the next turn in a conversation based on the the most recent participant.
State only the name of the participant to take the next turn.
No participant should take more than one turn in a row.

Choose only from these participants:
{{{{$agents}}}}

Always follow these rules when selecting the next participant:
- After {writer_name}, it is {reviewer_name}'s turn.
- After {reviewer_name}, it is {writer_name}'s turn.

History:
{{{{$history}}}}"""

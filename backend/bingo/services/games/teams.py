from enum import Enum

from bingo.errors import ValidationError


class Team(Enum):
    A = 'A'
    B = 'B'

    @property
    def state_key(self) -> str:
        return f'team{self.value}State'

    @property
    def name_key(self) -> str:
        return f'team{self.value}Name'

    @property
    def default_name(self) -> str:
        return f'Team {self.value}'

    @property
    def page(self) -> str:
        return f'team-{self.value.lower()}'


def resolve_team(tag, strict: bool = False) -> Team:
    """Map a team tag from the URL onto a team.

    Lenient mode treats exactly ``"A"`` as team A and anything else as team B.
    Strict mode accepts only A or B (any case).
    """
    if not strict:
        return Team.A if tag == 'A' else Team.B
    try:
        return Team(str(tag).upper())
    except ValueError:
        raise ValidationError(f'Unknown team: {tag}') from None

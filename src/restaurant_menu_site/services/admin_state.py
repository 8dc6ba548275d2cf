"""Per-row admin editor state and its transitions.

The editor state is a mapping of row id to an immutable ``RowState``. Every
change goes through ``reduce``, which returns a new mapping and never mutates
its input. Actions that name a row id not present in the state are ignored,
so a response that arrives after its rows were discarded has no effect.
"""

from dataclasses import dataclass, replace

from restaurant_menu_site.models.admin_models import AdminRowEdit, EditableField, RowStatusEnum
from restaurant_menu_site.models.menu_models import MenuRow

SUCCESS_STATUS_SECONDS = 2.0
ERROR_STATUS_SECONDS = 3.0


@dataclass(frozen=True)
class RowState:
    """Editor state of one row.

    Attributes:
        persisted: Last row known to be stored in the data service
        buffer: Values currently shown in the editable fields
        saving: A save is in flight for this row
        toggling: An availability toggle is in flight for this row
        status: Transient outcome of the last commit
        status_expires_at: Clock time after which ``status`` is no longer shown
    """

    persisted: MenuRow
    buffer: AdminRowEdit
    saving: bool = False
    toggling: bool = False
    status: RowStatusEnum | None = None
    status_expires_at: float | None = None

    @property
    def is_dirty(self) -> bool:
        return self.buffer.differs_from(self.persisted)

    @property
    def can_save(self) -> bool:
        return self.is_dirty and not self.saving

    def visible_status(self, now: float) -> RowStatusEnum | None:
        if self.status is None or self.status_expires_at is None or now >= self.status_expires_at:
            return None
        return self.status

    def with_status(self, status: RowStatusEnum, now: float) -> "RowState":
        duration = SUCCESS_STATUS_SECONDS if status is RowStatusEnum.SUCCESS else ERROR_STATUS_SECONDS
        return replace(self, status=status, status_expires_at=now + duration)


EditorState = dict[str, RowState]


@dataclass(frozen=True)
class LoadRows:
    rows: tuple[MenuRow, ...]


@dataclass(frozen=True)
class EditField:
    row_id: str
    field: EditableField
    value: str | bool


@dataclass(frozen=True)
class SaveStart:
    row_id: str


@dataclass(frozen=True)
class SaveSuccess:
    row_id: str
    row: MenuRow
    now: float


@dataclass(frozen=True)
class SaveError:
    row_id: str
    now: float


@dataclass(frozen=True)
class ToggleStart:
    row_id: str
    value: bool


@dataclass(frozen=True)
class ToggleSuccess:
    row_id: str
    row: MenuRow
    now: float


@dataclass(frozen=True)
class ToggleError:
    row_id: str
    previous_value: bool
    now: float


@dataclass(frozen=True)
class StatusExpired:
    now: float


EditorAction = (
    LoadRows
    | EditField
    | SaveStart
    | SaveSuccess
    | SaveError
    | ToggleStart
    | ToggleSuccess
    | ToggleError
    | StatusExpired
)

_ROW_ACTIONS = (EditField, SaveStart, SaveSuccess, SaveError, ToggleStart, ToggleSuccess, ToggleError)


def _update_row(state: EditorState, row_id: str, row_state: RowState) -> EditorState:
    updated = dict(state)
    updated[row_id] = row_state
    return updated


def _expire_statuses(state: EditorState, now: float) -> EditorState:
    updated = dict(state)
    for row_id, row_state in state.items():
        if row_state.status is not None and row_state.visible_status(now) is None:
            updated[row_id] = replace(row_state, status=None, status_expires_at=None)
    return updated


def reduce(state: EditorState, action: EditorAction) -> EditorState:
    """Apply one action to the editor state.

    Args:
        state: Current state, left unmodified
        action: The transition to apply

    Returns:
        The new state
    """
    if isinstance(action, LoadRows):
        return {row.id: RowState(persisted=row, buffer=AdminRowEdit.from_row(row)) for row in action.rows}

    if isinstance(action, StatusExpired):
        return _expire_statuses(state, action.now)

    if not isinstance(action, _ROW_ACTIONS):
        raise TypeError(f"Unknown editor action: {type(action).__name__}")

    current = state.get(action.row_id)
    if current is None:
        return state

    if isinstance(action, EditField):
        next_state = replace(current, buffer=current.buffer.with_field(action.field, action.value))
    elif isinstance(action, SaveStart):
        next_state = replace(current, saving=True)
    elif isinstance(action, SaveSuccess):
        next_state = replace(
            current,
            persisted=action.row,
            buffer=AdminRowEdit.from_row(action.row),
            saving=False,
        ).with_status(RowStatusEnum.SUCCESS, action.now)
    elif isinstance(action, SaveError):
        # Buffer stays as typed so the save can be retried
        next_state = replace(current, saving=False).with_status(RowStatusEnum.ERROR, action.now)
    elif isinstance(action, ToggleStart):
        next_state = replace(
            current,
            buffer=current.buffer.with_field("is_available", action.value),
            toggling=True,
        )
    elif isinstance(action, ToggleSuccess):
        next_state = replace(
            current,
            persisted=action.row,
            buffer=current.buffer.with_field("is_available", action.row.is_available),
            toggling=False,
        ).with_status(RowStatusEnum.SUCCESS, action.now)
    else:
        next_state = replace(
            current,
            buffer=current.buffer.with_field("is_available", action.previous_value),
            toggling=False,
        ).with_status(RowStatusEnum.ERROR, action.now)

    return _update_row(state, action.row_id, next_state)

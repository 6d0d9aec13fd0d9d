import datetime
import os
import warnings
from typing import Callable, Optional

import altair as alt
import pandas as pd
import streamlit as st
from altair.utils.deprecation import AltairDeprecationWarning
from pydantic import ValidationError

warnings.filterwarnings("ignore", category=AltairDeprecationWarning)

from calendar_service import CalendarView, month_grid
from client import ApiError, UnauthorizedError
from exercise_card import CommitTrigger, ExerciseCardState
from logger import setup_logger
from schemas import (
    Exercise,
    MuscleGroup,
    NewSetForm,
    SetType,
    WorkoutExercise,
    field_errors,
)
from tracker_api import TrackerAPI
from workout_reconciler import (
    LoadedWorkout,
    NoWorkout,
    ReconcileError,
    WorkoutState,
    add_exercise,
    delete_exercise,
    replace_sets,
    workout_exercises,
)

logger = setup_logger(__name__)

PAGES = ("login", "register", "workouts", "exercises")
PUBLIC_PAGES = ("login", "register")
# widget key prefix for each editable set field
SET_FIELDS = (("w", "weight"), ("r", "reps"), ("t", "set_type"), ("n", "notes"))


def _go_to(page: str) -> None:
    st.session_state.page = page
    st.query_params["page"] = page


def _go_to_login(path: str) -> None:
    """Called by the API client after a 401 cleared the credentials."""
    _go_to(path.strip("/") or "login")


class WorkoutTrackerApp:
    """Streamlit application for logging workouts against the remote API."""

    def __init__(self, yaml_path: str = "settings.yaml") -> None:
        if "tracker_api" not in st.session_state:
            st.session_state.tracker_api = TrackerAPI(
                yaml_path=yaml_path, on_unauthorized=_go_to_login
            )
        self.api: TrackerAPI = st.session_state.tracker_api
        self._state_init()

    def _state_init(self) -> None:
        defaults = {
            "page": st.query_params.get("page", "workouts"),
            "selected_date": datetime.date.today(),
            "editing": None,
            "form_errors": {},
            "form_message": None,
            "flash": None,
            "save_error": None,
            "add_dialog_open": False,
            "add_pick": None,
            "create_dialog_open": False,
            "edit_exercise": None,
        }
        for key, value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = value

    # navigation

    def _current_page(self) -> str:
        page = st.session_state.page if st.session_state.page in PAGES else "workouts"
        if not self.api.auth.is_authenticated and page not in PUBLIC_PAGES:
            page = "login"
        elif self.api.auth.is_authenticated and page in PUBLIC_PAGES:
            page = "workouts"
        if page != st.session_state.page:
            _go_to(page)
        return page

    def _navigate(self, page: str) -> None:
        self._commit_open_card(CommitTrigger.OUTSIDE_CLICK)
        st.session_state.form_errors = {}
        st.session_state.form_message = None
        _go_to(page)
        st.rerun()

    def run(self) -> None:
        page = self._current_page()
        try:
            if page == "login":
                self._login_page()
            elif page == "register":
                self._register_page()
            elif page == "exercises":
                self._exercises_page()
            else:
                self._workouts_page()
        except UnauthorizedError:
            st.session_state.editing = None
            st.rerun()

    # shared form helpers

    def _field_error(self, field: str) -> None:
        msg = st.session_state.form_errors.get(field)
        if msg:
            st.error(msg)

    def _form_message(self) -> None:
        if st.session_state.form_message:
            st.error(st.session_state.form_message)
        flash = st.session_state.flash
        if flash:
            st.success(flash)
            st.session_state.flash = None

    def _submit(self, action: Callable[[], None], failure: str) -> bool:
        """Run a form action, keeping validation and server errors for display."""
        st.session_state.form_errors = {}
        st.session_state.form_message = None
        try:
            action()
        except ValidationError as e:
            st.session_state.form_errors = field_errors(e)
            return False
        except ApiError as e:
            st.session_state.form_message = e.description or failure
            return False
        return True

    def _show_dialog(self, title: str, content_fn: Callable[[], None]) -> None:
        """Display a modal dialog using the decorator API."""

        @st.dialog(title)
        def _dlg() -> None:
            content_fn()

        _dlg()

    # auth pages

    def _login_page(self) -> None:
        st.title("Welcome Back")
        st.caption("Sign in to track your workouts")
        self._form_message()
        username = st.text_input("Username", key="login_username", placeholder="your-username")
        self._field_error("username")
        password = st.text_input("Password", type="password", key="login_password")
        self._field_error("password")
        if st.button("Sign In", key="login_submit", type="primary"):
            ok = self._submit(
                lambda: self.api.auth_service.login(username, password),
                "Login failed. Please try again.",
            )
            if ok:
                _go_to("workouts")
            st.rerun()
        if st.button("Don't have an account? Sign up", key="go_register"):
            self._navigate("register")

    def _register_page(self) -> None:
        st.title("Create Account")
        st.caption("Start tracking your workouts today")
        self._form_message()
        username = st.text_input("Username", key="register_username")
        self._field_error("username")
        password = st.text_input("Password", type="password", key="register_password")
        self._field_error("password")
        confirm = st.text_input("Confirm Password", type="password", key="register_confirm")
        self._field_error("confirm_password")
        if st.button("Sign Up", key="register_submit", type="primary"):
            ok = self._submit(
                lambda: self.api.auth_service.register(username, password, confirm),
                "Registration failed. Please try again.",
            )
            if ok:
                st.session_state.flash = "Account created. Please sign in."
                _go_to("login")
            st.rerun()
        if st.button("Already have an account? Sign in", key="go_login"):
            self._navigate("login")

    def _header(self, title: str, subtitle: str) -> None:
        cols = st.columns([6, 2, 2])
        with cols[0]:
            st.title(title)
            st.caption(subtitle)
        with cols[1]:
            if st.session_state.page == "workouts":
                if st.button("Exercise Library", key="nav_exercises"):
                    self._navigate("exercises")
            elif st.button("Back to Workouts", key="nav_workouts"):
                self._navigate("workouts")
        with cols[2]:
            if self.api.auth.username:
                st.write(f"Signed in as **{self.api.auth.username}**")
            if st.button("Logout", key="logout"):
                self._commit_open_card(CommitTrigger.OUTSIDE_CLICK)
                self.api.auth_service.logout()
                st.session_state.editing = None
                _go_to("login")
                st.rerun()

    # workouts page

    def _on_date_change(self) -> None:
        self._commit_open_card(CommitTrigger.OUTSIDE_CLICK)

    def _workouts_page(self) -> None:
        self._header("Workout Tracker", "Track your fitness journey")
        if st.session_state.save_error:
            st.error(st.session_state.save_error)
            st.session_state.save_error = None
        selected: datetime.date = st.session_state.selected_date
        view = self.api.calendar.select(selected)
        cal_col, day_col = st.columns([5, 7])
        with cal_col:
            self._calendar(view)
        with day_col:
            self._day_panel(selected, view.state)
        if st.session_state.add_dialog_open:
            self._add_exercise_dialog(view.state)

    def _calendar(self, view: CalendarView) -> None:
        st.subheader("Workout Calendar")
        st.date_input(
            "Date",
            key="selected_date",
            on_change=self._on_date_change,
        )
        st.caption(f"{view.workout_count} workouts this month")
        month = view.visible_month
        df = month_grid(month.year, month.month, set(view.highlighted))
        df["status"] = "rest"
        df.loc[df["has_workout"], "status"] = "workout"
        df.loc[df["date"].dt.date == st.session_state.selected_date, "status"] = "selected"
        base = alt.Chart(df).encode(
            x=alt.X(
                "weekday",
                sort=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
                title=None,
            ),
            y=alt.Y("week:O", axis=None),
        )
        cells = base.mark_rect(stroke="white").encode(
            color=alt.Color(
                "status:N",
                scale=alt.Scale(
                    domain=["rest", "workout", "selected"],
                    range=["#eeeeee", "steelblue", "crimson"],
                ),
                legend=None,
            ),
            tooltip=["date:T", "has_workout"],
        )
        labels = base.mark_text().encode(text="day:Q")
        st.altair_chart(cells + labels, use_container_width=True)
        st.caption("Blue: logged workout. Red: selected date.")

    def _day_panel(self, day: datetime.date, state: WorkoutState) -> None:
        st.subheader(day.strftime("%A, %B %d, %Y"))
        if isinstance(state, NoWorkout):
            st.markdown("### No workout logged")
            st.write("Start tracking your exercises for this day")
            if st.button("Create Workout", key="create_workout", type="primary"):
                self._open_add_dialog()
            return
        items = workout_exercises(state)
        st.caption(f"{len(items)} exercise{'s' if len(items) != 1 else ''}")
        if st.button("Add Exercise", key="add_exercise"):
            self._open_add_dialog()
        for position, we in enumerate(items):
            self._exercise_card(state, position, we)

    def _open_add_dialog(self) -> None:
        self._commit_open_card(CommitTrigger.OUTSIDE_CLICK)
        st.session_state.add_dialog_open = True
        st.session_state.add_pick = None
        st.session_state.form_errors = {}
        st.rerun()

    def _card_key(self, state: LoadedWorkout, position: int) -> str:
        return f"{state.workout.id}:{position}"

    def _editing_card(self, key: str) -> Optional[ExerciseCardState]:
        editing = st.session_state.get("editing")
        if editing and editing["key"] == key:
            return editing["card"]
        return None

    def _sync_draft(self, key: str) -> None:
        """Copy the set inputs of card ``key`` into its draft."""
        card = self._editing_card(key)
        if card is None:
            return
        for idx in range(len(card.draft)):
            for prefix, name in SET_FIELDS:
                widget = f"{prefix}_{key}_{idx}"
                if widget in st.session_state:
                    card.set_field(idx, name, st.session_state[widget])

    def _commit_open_card(self, trigger: CommitTrigger) -> None:
        """Commit the card being edited, if any, through the reconciler.

        The workout is reloaded first so sets saved by an earlier card are
        carried through rather than overwritten.
        """
        editing = st.session_state.get("editing")
        if not editing:
            return
        key: str = editing["key"]
        card: ExerciseCardState = editing["card"]
        self._sync_draft(key)
        st.session_state.editing = None
        self._reset_set_keys(key, len(card.draft))

        def _save(sets) -> None:
            state = self.api.calendar.select(editing["date"]).state
            self.api.workouts.apply(replace_sets(state, editing["position"], sets))

        try:
            card.commit(trigger, _save)
        except UnauthorizedError:
            st.session_state.add_dialog_open = False
        except (ApiError, ReconcileError) as e:
            logger.warning("Could not save exercise %s: %s", key, e)
            st.session_state.save_error = f"Could not save workout: {e}"

    def _exercise_card(self, state: LoadedWorkout, position: int, we: WorkoutExercise) -> None:
        key = self._card_key(state, position)
        card = self._editing_card(key)
        with st.container(border=True):
            st.markdown(f"**{we.exercise_order}. {we.exercise.name}**")
            if card is None:
                self._sets_table(we)
                if st.button("Edit", key=f"edit_{key}"):
                    self._commit_open_card(CommitTrigger.OUTSIDE_CLICK)
                    card = ExerciseCardState()
                    card.begin_edit(we.sets)
                    st.session_state.editing = {
                        "key": key,
                        "card": card,
                        "date": state.date,
                        "position": position,
                    }
                    st.rerun()
                return
            self._edit_sets(key, card)
            if st.button("Delete Exercise", key=f"delete_{key}"):
                self._reset_set_keys(key, len(card.draft))
                st.session_state.editing = None
                self.api.workouts.apply(delete_exercise(state, position))
                st.rerun()

    def _sets_table(self, we: WorkoutExercise) -> None:
        if not we.sets:
            st.caption("No sets logged")
            return
        rows = [
            {
                "Set": idx,
                "Weight (kg)": s.weight,
                "Reps": s.reps,
                "Type": s.set_type.label,
                "Notes": s.notes or "-",
            }
            for idx, s in enumerate(we.sets, start=1)
        ]
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)

    def _edit_sets(self, key: str, card: ExerciseCardState) -> None:
        set_types = [t.value for t in SetType]
        sync = {"on_change": self._sync_draft, "args": (key,)}
        for idx, row in enumerate(card.draft):
            cols = st.columns([1, 3, 2, 3, 3, 2])
            cols[0].markdown(f"**{idx + 1}**")
            cols[1].text_input("Weight (kg)", value=f"{row.weight:g}", key=f"w_{key}_{idx}", **sync)
            cols[2].text_input("Reps", value=str(row.reps), key=f"r_{key}_{idx}", **sync)
            cols[3].selectbox(
                "Type",
                set_types,
                index=set_types.index(row.set_type.value),
                format_func=lambda v: SetType(v).label,
                key=f"t_{key}_{idx}",
                **sync,
            )
            cols[4].text_input("Notes", value=row.notes, max_chars=250, key=f"n_{key}_{idx}", **sync)
            if cols[5].button("Remove", key=f"rm_{key}_{idx}"):
                self._sync_draft(key)
                count = len(card.draft)
                card.remove_set(idx)
                self._reset_set_keys(key, count)
                st.rerun()
        cols = st.columns(2)
        if cols[0].button("Save", key=f"save_{key}", type="primary"):
            self._commit_open_card(CommitTrigger.SAVE)
            st.rerun()
        if cols[1].button("Add Set", key=f"add_set_{key}"):
            self._sync_draft(key)
            card.add_set()
            st.rerun()

    def _reset_set_keys(self, key: str, count: int) -> None:
        for idx in range(count):
            for prefix, _name in SET_FIELDS:
                st.session_state.pop(f"{prefix}_{key}_{idx}", None)

    def _add_exercise_dialog(self, state: WorkoutState) -> None:
        def _content() -> None:
            pick: Optional[Exercise] = st.session_state.add_pick
            if pick is None:
                st.caption("Select an exercise to add to your workout")
                library = {
                    group: rows
                    for group, rows in self.api.exercises.get_library().items()
                    if rows
                }
                if not library:
                    st.info("Your exercise library is empty. Create exercises first.")
                else:
                    tabs = st.tabs([g.label for g in library])
                    for tab, (group, rows) in zip(tabs, library.items()):
                        with tab:
                            for ex in rows:
                                if st.button(ex.name, key=f"pick_{ex.id}"):
                                    st.session_state.add_pick = ex
                                    st.rerun()
                if st.button("Cancel", key="add_cancel"):
                    st.session_state.add_dialog_open = False
                    st.rerun()
                return
            st.markdown(f"### {pick.name}")
            st.caption("Enter the details for your first set")
            weight = st.number_input("Weight (kg)", value=20.0, step=0.5, key="add_weight")
            self._field_error("weight")
            reps = st.number_input("Reps", value=10, step=1, key="add_reps")
            self._field_error("reps")
            set_type = st.selectbox(
                "Set Type",
                [t.value for t in SetType],
                index=1,
                format_func=lambda v: SetType(v).label,
                key="add_set_type",
            )
            cols = st.columns(2)
            if cols[0].button("Back", key="add_back"):
                st.session_state.add_pick = None
                st.rerun()
            if cols[1].button("Add Exercise", key="add_submit", type="primary"):

                def _save() -> None:
                    first = NewSetForm(reps=int(reps), weight=weight, set_type=set_type)
                    self.api.workouts.apply(add_exercise(state, pick.id, [first.to_set()]))

                if self._submit(_save, "Could not save workout"):
                    st.session_state.add_dialog_open = False
                    st.session_state.add_pick = None
                st.rerun()

        self._show_dialog("Add Exercise to Workout", _content)

    # exercises page

    def _exercises_page(self) -> None:
        self._header("Exercise Library", "Manage the exercises you can log")
        self._form_message()
        if st.button("Create Exercise", key="open_create_exercise"):
            st.session_state.create_dialog_open = True
            st.session_state.form_errors = {}
            st.rerun()
        groups = list(MuscleGroup)
        tabs = st.tabs([g.label for g in groups])
        for tab, group in zip(tabs, groups):
            with tab:
                rows = self.api.exercises.get_exercises_by_muscle_group(group)
                if not rows:
                    st.caption("No exercises found for this muscle group")
                for ex in rows:
                    cols = st.columns([6, 1, 1])
                    cols[0].markdown(f"**{ex.name}**")
                    if cols[1].button("Edit", key=f"ex_edit_{ex.id}"):
                        st.session_state.edit_exercise = ex
                        st.session_state.form_errors = {}
                        st.rerun()
                    if cols[2].button("Delete", key=f"ex_delete_{ex.id}"):
                        self.api.exercises.delete_exercise(ex.id)
                        st.rerun()
        if st.session_state.create_dialog_open:
            self._create_exercise_dialog()
        elif st.session_state.edit_exercise is not None:
            self._edit_exercise_dialog(st.session_state.edit_exercise)

    def _exercise_form(self, prefix: str, name: str, group: MuscleGroup) -> tuple[str, str]:
        groups = [g.value for g in MuscleGroup]
        name_val = st.text_input(
            "Exercise Name", value=name, placeholder="e.g. Bench Press", key=f"{prefix}_name"
        )
        self._field_error("name")
        group_val = st.selectbox(
            "Muscle Group",
            groups,
            index=groups.index(group.value),
            format_func=lambda v: MuscleGroup(v).label,
            key=f"{prefix}_group",
        )
        self._field_error("muscle_group")
        return name_val, group_val

    def _create_exercise_dialog(self) -> None:
        def _content() -> None:
            st.caption("Add a new exercise to your library")
            name, group = self._exercise_form("create_ex", "", MuscleGroup.CHEST)
            cols = st.columns(2)
            if cols[0].button("Cancel", key="create_ex_cancel"):
                st.session_state.create_dialog_open = False
                st.rerun()
            if cols[1].button("Create Exercise", key="create_ex_submit", type="primary"):

                def _create() -> None:
                    self.api.exercises.create_exercise(name, group)

                if self._submit(_create, "Could not create exercise"):
                    st.session_state.create_dialog_open = False
                st.rerun()

        self._show_dialog("Create New Exercise", _content)

    def _edit_exercise_dialog(self, ex: Exercise) -> None:
        def _content() -> None:
            name, group = self._exercise_form(f"edit_ex_{ex.id}", ex.name, ex.muscle_group)
            cols = st.columns(2)
            if cols[0].button("Cancel", key="edit_ex_cancel"):
                st.session_state.edit_exercise = None
                st.rerun()
            if cols[1].button("Save", key="edit_ex_submit", type="primary"):

                def _update() -> None:
                    self.api.exercises.update_exercise(ex.id, name=name, muscle_group=group)

                if self._submit(_update, "Could not update exercise"):
                    st.session_state.edit_exercise = None
                st.rerun()

        self._show_dialog("Edit Exercise", _content)


if __name__ == "__main__":
    yaml_path = os.environ.get("YAML_PATH", "settings.yaml")
    WorkoutTrackerApp(yaml_path=yaml_path).run()

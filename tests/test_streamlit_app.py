import datetime
import os
import sys
import unittest
import warnings
from altair.utils.deprecation import AltairDeprecationWarning

warnings.simplefilter("ignore", AltairDeprecationWarning)

from streamlit.testing.v1 import AppTest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from fake_session import FakeWorkoutServer
from tracker_api import TrackerAPI

DAY = datetime.date(2024, 5, 1)
EXERCISES = [
    {"id": "1", "name": "Bench Press", "muscleGroup": "CHEST"},
    {"id": "2", "name": "Barbell Row", "muscleGroup": "BACK"},
]
BENCH_SETS = [{"reps": 8, "weight": 80.0, "setType": "WORKING"}]
ROW_SETS = [{"reps": 10, "weight": 60.0, "setType": "WORKING"}]


class StreamlitAppTest(unittest.TestCase):
    def setUp(self) -> None:
        self.yaml_path = "test_gui_settings.yaml"
        if os.path.exists(self.yaml_path):
            os.remove(self.yaml_path)
        os.environ["YAML_PATH"] = self.yaml_path
        self.at = AppTest.from_file("../streamlit_app.py", default_timeout=20)
        self.at.run(timeout=20)

    def tearDown(self) -> None:
        if os.path.exists(self.yaml_path):
            os.remove(self.yaml_path)
        os.environ.pop("YAML_PATH", None)

    def _errors(self) -> list[str]:
        return [e.value for e in self.at.error]

    def test_signed_out_user_sees_login(self) -> None:
        self.assertEqual(self.at.title[0].value, "Welcome Back")
        self.assertEqual(self.at.session_state.page, "login")

    def test_empty_login_shows_field_errors(self) -> None:
        self.at.button(key="login_submit").click().run()
        self.assertIn("Username is required", self._errors())
        self.assertIn("password", self.at.session_state.form_errors)
        self.assertEqual(self.at.title[0].value, "Welcome Back")

    def test_switch_to_register(self) -> None:
        self.at.button(key="go_register").click().run()
        self.assertEqual(self.at.title[0].value, "Create Account")
        self.at.button(key="go_login").click().run()
        self.assertEqual(self.at.title[0].value, "Welcome Back")

    def test_register_password_mismatch(self) -> None:
        self.at.button(key="go_register").click().run()
        self.at.text_input(key="register_username").input("sam")
        self.at.text_input(key="register_password").input("secret1")
        self.at.text_input(key="register_confirm").input("secret2")
        self.at.button(key="register_submit").click().run()
        self.assertIn("Passwords don't match", self._errors())
        self.assertEqual(self.at.title[0].value, "Create Account")


class WorkoutsPageTest(unittest.TestCase):
    def setUp(self) -> None:
        self.yaml_path = "test_gui_workouts.yaml"
        if os.path.exists(self.yaml_path):
            os.remove(self.yaml_path)
        os.environ["YAML_PATH"] = self.yaml_path
        self.server = FakeWorkoutServer(EXERCISES)
        self.api = TrackerAPI(self.yaml_path, session=self.server)
        self.api.auth.store("sam", "tok")
        self.at = AppTest.from_file("../streamlit_app.py", default_timeout=20)
        self.at.session_state["tracker_api"] = self.api
        self.at.session_state["selected_date"] = DAY

    def tearDown(self) -> None:
        if os.path.exists(self.yaml_path):
            os.remove(self.yaml_path)
        os.environ.pop("YAML_PATH", None)

    def _puts(self, workout_id: str) -> list[dict]:
        return self.server.calls_to("PUT", f"/workouts/{workout_id}")

    def _edit(self, card: str) -> None:
        self.at.button(key=f"edit_{card}").click().run()
        self.assertFalse(self.at.exception)

    def test_empty_day_offers_create_workout(self) -> None:
        self.at.run()
        self.assertEqual(self.at.title[0].value, "Workout Tracker")
        self.assertEqual(self.at.button(key="create_workout").label, "Create Workout")
        self.assertEqual(self.server.mutations(), [])

    def test_save_commits_once(self) -> None:
        wid = self.server.add_workout("2024-05-01", [("1", BENCH_SETS), ("2", ROW_SETS)])
        self.at.run()
        self._edit(f"{wid}:0")
        self.at.text_input(key=f"w_{wid}:0_0").input("99")
        self.at.button(key=f"save_{wid}:0").click().run()
        self.assertFalse(self.at.exception)
        self.assertEqual(len(self._puts(wid)), 1)
        self.assertEqual(self.server.sets_of(wid)[0][0]["weight"], 99.0)
        self.assertEqual(self.server.sets_of(wid)[1], ROW_SETS)
        self.assertEqual(self.at.button(key=f"edit_{wid}:0").label, "Edit")

    def test_switching_cards_keeps_first_card_edits(self) -> None:
        wid = self.server.add_workout("2024-05-01", [("1", BENCH_SETS), ("2", ROW_SETS)])
        self.at.run()
        self._edit(f"{wid}:0")
        self.at.text_input(key=f"w_{wid}:0_0").input("99")
        self.at.button(key=f"add_set_{wid}:0").click().run()
        self._edit(f"{wid}:1")
        self.assertEqual(len(self._puts(wid)), 1)
        self.assertEqual([s["weight"] for s in self.server.sets_of(wid)[0]], [99.0, 99.0])

        self.at.text_input(key=f"r_{wid}:1_0").input("6")
        self.at.button(key=f"save_{wid}:1").click().run()
        self.assertEqual(len(self._puts(wid)), 2)
        bench, row = self.server.sets_of(wid)
        self.assertEqual([s["weight"] for s in bench], [99.0, 99.0])
        self.assertEqual(row[0]["reps"], 6)

    def test_date_change_commits_typed_values(self) -> None:
        wid = self.server.add_workout("2024-05-01", [("1", BENCH_SETS)])
        self.at.run()
        self._edit(f"{wid}:0")
        self.at.text_input(key=f"w_{wid}:0_0").input("99")
        self.at.date_input(key="selected_date").set_value(datetime.date(2024, 5, 2)).run()
        self.assertFalse(self.at.exception)
        self.assertEqual(len(self._puts(wid)), 1)
        self.assertEqual(self.server.sets_of(wid)[0][0]["weight"], 99.0)
        self.assertEqual(self.at.button(key="create_workout").label, "Create Workout")

    def test_deleting_last_exercise_deletes_workout(self) -> None:
        wid = self.server.add_workout("2024-05-01", [("1", BENCH_SETS)])
        self.at.run()
        self._edit(f"{wid}:0")
        self.at.button(key=f"delete_{wid}:0").click().run()
        self.assertFalse(self.at.exception)
        self.assertEqual(len(self.server.calls_to("DELETE", f"/workouts/{wid}")), 1)
        self.assertEqual(self._puts(wid), [])
        self.assertNotIn(wid, self.server.workouts)
        self.assertEqual(self.at.button(key="create_workout").label, "Create Workout")

    def test_add_exercise_on_empty_day_creates_workout(self) -> None:
        self.at.run()
        self.at.button(key="create_workout").click().run()
        self.at.button(key="pick_2").click().run()
        self.at.button(key="add_submit").click().run()
        self.assertFalse(self.at.exception)
        posts = self.server.calls_to("POST", "/workouts")
        self.assertEqual(len(posts), 1)
        self.assertEqual(
            posts[0]["json"],
            {
                "date": "2024-05-01",
                "workoutExercises": [
                    {
                        "exerciseId": "2",
                        "exerciseOrder": 1,
                        "sets": [{"reps": 10, "weight": 20.0, "setType": "WORKING"}],
                    }
                ],
            },
        )
        self.assertFalse(self.at.session_state.add_dialog_open)

    def test_unauthorized_save_returns_to_login(self) -> None:
        wid = self.server.add_workout("2024-05-01", [("1", BENCH_SETS)])
        self.at.run()
        self._edit(f"{wid}:0")
        self.at.text_input(key=f"w_{wid}:0_0").input("99")
        self.server.reject_writes = True
        self.at.date_input(key="selected_date").set_value(datetime.date(2024, 5, 2)).run()
        self.assertFalse(self.at.exception)
        self.assertEqual(self.at.title[0].value, "Welcome Back")
        self.assertFalse(self.api.auth.is_authenticated)


if __name__ == "__main__":
    unittest.main()

import json
from urllib.parse import urlsplit

import requests


def make_response(status: int, body=None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = {200: "OK", 201: "Created", 204: "No Content", 400: "Bad Request",
                   401: "Unauthorized", 404: "Not Found", 500: "Server Error"}.get(status, "")
    resp._content = b"" if body is None else json.dumps(body).encode("utf-8")
    resp.headers["Content-Type"] = "application/json"
    return resp


class FakeSession:
    """Stand-in for ``requests.Session`` that records calls and replays routes.

    Routes map ``(METHOD, path)`` to ``(status, body)`` or to a callable taking
    the recorded call and returning such a tuple.
    """

    def __init__(self, routes=None) -> None:
        self.routes = dict(routes or {})
        self.calls: list[dict] = []

    def route(self, method: str, path: str, status: int = 200, body=None) -> None:
        self.routes[(method, path)] = (status, body)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        path = urlsplit(url).path
        for prefix in ("/api/v1.0",):
            if path.startswith(prefix):
                path = path[len(prefix):]
        call = {
            "method": method,
            "path": path,
            "params": params,
            "json": json,
            "headers": dict(headers or {}),
        }
        self.calls.append(call)
        handler = self.routes.get((method, path))
        if handler is None:
            return make_response(404, {"code": "NOT_FOUND", "description": f"No route {path}"})
        if callable(handler):
            handler = handler(call)
        status, body = handler
        return make_response(status, body)

    def calls_to(self, method: str, path: str) -> list[dict]:
        return [c for c in self.calls if c["method"] == method and c["path"] == path]

    def mutations(self) -> list[dict]:
        return [c for c in self.calls if c["method"] != "GET"]


class FakeWorkoutServer(FakeSession):
    """FakeSession that stores workouts and answers the workout endpoints."""

    def __init__(self, exercises: list[dict]) -> None:
        super().__init__()
        self.exercises = {str(e["id"]): e for e in exercises}
        self.workouts: dict[str, dict] = {}
        self.reject_writes = False
        self._next_id = 7
        self.routes[("GET", "/workouts")] = self._list
        self.routes[("POST", "/workouts")] = self._create
        self.routes[("GET", "/exercises")] = lambda call: (
            200,
            [e for e in exercises if e["muscleGroup"] == call["params"]["muscleGroup"]],
        )

    def add_workout(self, date: str, entries) -> str:
        """Store a workout from ``(exercise_id, sets)`` pairs and return its id."""
        body = {
            "date": date,
            "workoutExercises": [
                {"exerciseId": ex_id, "exerciseOrder": order, "sets": sets}
                for order, (ex_id, sets) in enumerate(entries, start=1)
            ],
        }
        return self._store(None, body)

    def sets_of(self, workout_id: str) -> list[list[dict]]:
        return [we["sets"] for we in self.workouts[workout_id]["workoutExercises"]]

    def _store(self, workout_id, body: dict) -> str:
        if workout_id is None:
            workout_id = str(self._next_id)
            self._next_id += 1
            self.routes[("GET", f"/workouts/{workout_id}")] = self._getter(workout_id)
            self.routes[("PUT", f"/workouts/{workout_id}")] = self._putter(workout_id)
            self.routes[("DELETE", f"/workouts/{workout_id}")] = self._deleter(workout_id)
        self.workouts[workout_id] = {
            "id": workout_id,
            "date": body["date"],
            "workoutExercises": [
                {
                    "id": f"{workout_id}-{we['exerciseOrder']}",
                    "exercise": self.exercises[str(we["exerciseId"])],
                    "exerciseOrder": we["exerciseOrder"],
                    "sets": we["sets"],
                }
                for we in body["workoutExercises"]
            ],
        }
        return workout_id

    def _list(self, call):
        start, end = call["params"]["startDate"], call["params"]["endDate"]
        return 200, [
            {"id": w["id"], "date": w["date"]}
            for w in self.workouts.values()
            if start <= w["date"] <= end
        ]

    def _create(self, call):
        if self.reject_writes:
            return 401, None
        workout_id = self._store(None, call["json"])
        return 201, self.workouts[workout_id]

    def _getter(self, workout_id):
        def handler(call):
            if workout_id not in self.workouts:
                return 404, {"code": "NOT_FOUND", "description": "Workout not found"}
            return 200, self.workouts[workout_id]
        return handler

    def _putter(self, workout_id):
        def handler(call):
            if self.reject_writes:
                return 401, None
            self._store(workout_id, call["json"])
            return 200, self.workouts[workout_id]
        return handler

    def _deleter(self, workout_id):
        def handler(call):
            self.workouts.pop(workout_id, None)
            return 204, None
        return handler

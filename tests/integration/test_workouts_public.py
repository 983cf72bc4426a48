"""Integration tests for the workouts and workout-exercises HTTP API."""

import uuid

import pytest
from tests.factories import WorkoutFactory, seed_team, seed_workout


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_and_get_workout(client):
    created = await client.post(
        "/workouts",
        json={"title": "Conditioning", "isPublic": True, "totalDuration": 45},
    )
    assert created.status_code == 201
    workout = created.json()
    assert workout["creatorId"] == "coach-1"
    assert workout["isPublic"] is True

    exercise_id = str(uuid.uuid4())
    step = await client.post(
        "/workout-exercises",
        json={"workoutId": workout["id"], "exerciseId": exercise_id, "order": 0},
    )
    assert step.status_code == 201

    detail = await client.get(f"/workouts/{workout['id']}")
    assert detail.status_code == 200
    assert detail.json()["exerciseCount"] == 1
    assert detail.json()["exercises"][0]["exerciseId"] == exercise_id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_workouts_pagination_block(client, db_session):
    db_session.add_all([WorkoutFactory.create(title=f"Plan {i}") for i in range(3)])
    await db_session.commit()

    response = await client.get("/workouts", params={"page": 1, "limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert len(body["workouts"]) == 2
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_public_workout_visible_to_others_but_not_editable(client, act_as):
    created = (
        await client.post("/workouts", json={"title": "Open plan", "isPublic": True})
    ).json()

    act_as("someone-else")
    assert (await client.get(f"/workouts/{created['id']}")).status_code == 200
    edit = await client.patch(f"/workouts/{created['id']}", json={"title": "Mine now"})
    assert edit.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_team_workout_needs_leader(client, db_session, act_as):
    team, _ = await seed_team(db_session, players=1)
    act_as("player-1")

    response = await client.post(
        "/workouts", json={"title": "Player plan", "teamId": str(team.id)}
    )

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_workout_does_not_reach_scheduled_session(client, db_session):
    team, _ = await seed_team(db_session, players=1)
    workout, exercises = await seed_workout(db_session, steps=2)
    session = (
        await client.post(
            "/training-sessions",
            json={
                "teamId": str(team.id),
                "title": "Practice",
                "scheduledAt": "2030-01-01T18:00:00+00:00",
                "workoutId": str(workout.id),
            },
        )
    ).json()

    await client.patch(
        f"/workout-exercises/{exercises[0].id}", json={"duration": 99, "notes": "harder"}
    )

    session_exercises = (
        await client.get("/session-exercises", params={"sessionId": session["id"]})
    ).json()["exercises"]
    assert session_exercises[0]["duration"] == 5
    assert session_exercises[0]["notes"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_workout_exercise_renumbers(client, db_session):
    workout, exercises = await seed_workout(db_session, steps=3)

    response = await client.delete(f"/workout-exercises/{exercises[0].id}")
    assert response.status_code == 204

    remaining = (
        await client.get("/workout-exercises", params={"workoutId": str(workout.id)})
    ).json()["exercises"]
    assert [e["order"] for e in remaining] == [0, 1]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_workout(client, db_session):
    workout, _ = await seed_workout(db_session, steps=1)
    workout_id = str(workout.id)

    assert (await client.delete(f"/workouts/{workout_id}")).status_code == 204
    assert (await client.get(f"/workouts/{workout_id}")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_patch_workout_with_null_title_is_400(client, db_session):
    workout, _ = await seed_workout(db_session, steps=0)
    workout_id = str(workout.id)

    response = await client.patch(f"/workouts/{workout_id}", json={"title": None})

    assert response.status_code == 400
    assert (await client.get(f"/workouts/{workout_id}")).json()["title"]

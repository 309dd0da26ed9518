import unittest

from fastapi.testclient import TestClient

from dashboard import accounts
from dashboard.app import create_app
from dashboard.config import get_settings
from dashboard.dependencies import (
    get_auth_client,
    get_document_store,
    get_realtime_store,
    get_repository,
    reset_clients,
)
from dashboard.schemas import (
    BusIn,
    LiveLocationIn,
    RouteIn,
    SignInRequest,
    SignUpRequest,
)


class ScreenTests(unittest.TestCase):
    def setUp(self):
        reset_clients()
        app = create_app()
        self.anonymous = TestClient(app)
        self.client = TestClient(app)
        self.repo = get_repository()
        self.cookie_name = get_settings().session_cookie_name
        auth = get_auth_client()
        accounts.sign_up(
            auth,
            get_document_store(),
            SignUpRequest(email="admin@example.com", password="secret1"),
        )
        session = accounts.sign_in(
            auth, SignInRequest(email="admin@example.com", password="secret1")
        )
        self.client.cookies.set(self.cookie_name, session.id_token)

    def tearDown(self):
        reset_clients()

    def _sign_up_and_in(self):
        self.client.post(
            "/signup",
            data={
                "email": "staff@example.com",
                "password": "secret1",
                "display_name": "Staff",
            },
            follow_redirects=False,
        )
        response = self.client.post(
            "/signin",
            data={"email": "staff@example.com", "password": "secret1"},
            follow_redirects=False,
        )
        self.client.cookies.set(self.cookie_name, response.cookies.get(self.cookie_name))
        return response

    def test_listing_screens_render(self):
        route = self.repo.create_route(RouteIn(name="Campus Loop"))
        bus = self.repo.create_bus(
            BusIn(bus_number="B12", plate_number="WXY 1234", route_id=route.id)
        )
        self.repo.publish_live_location(
            bus.id, LiveLocationIn(latitude=2.31, longitude=102.32)
        )
        for path, text in (
            ("/dashboard-default", "Buses reporting now"),
            ("/tables", "WXY 1234"),
            ("/bus-location", "B12"),
            ("/drivers", "Add driver"),
            ("/buses", "WXY 1234"),
            ("/locations", "Add route point"),
            ("/routes", "Campus Loop"),
            (f"/routes/{route.id}/schedule", "Campus Loop schedule"),
            ("/signin", "Sign in"),
            ("/signup", "Sign up"),
        ):
            response = self.client.get(path)
            self.assertEqual(response.status_code, 200, path)
            self.assertIn(text, response.text, path)

    def test_sidebar_highlights_current_screen(self):
        response = self.client.get("/buses")
        self.assertIn('href="/buses" class="active"', response.text)
        self.assertIn('href="/drivers" class=""', response.text)

    def test_create_and_delete_driver_with_photo(self):
        response = self.client.post(
            "/drivers",
            data={"name": "Aina", "email": "aina@example.com", "bus_id": ""},
            files={"photo": ("face.jpg", b"jpeg-bytes", "image/jpeg")},
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/drivers")

        drivers = self.repo.list_drivers()
        self.assertEqual(len(drivers), 1)
        self.assertEqual(drivers[0].photo_path, f"drivers/{drivers[0].id}/photo.jpg")
        self.assertIn("Aina", self.client.get("/drivers").text)

        response = self.client.post(
            f"/drivers/{drivers[0].id}/delete", follow_redirects=False
        )
        self.assertEqual(response.status_code, 303)
        self.assertEqual(self.repo.list_drivers(), [])

    def test_create_bus_route_and_point(self):
        self.client.post(
            "/routes",
            data={"name": "Campus Loop", "description": "Main loop", "active": "on"},
            follow_redirects=False,
        )
        route = self.repo.list_routes()[0]
        self.assertTrue(route.active)

        self.client.post(
            "/buses",
            data={
                "bus_number": "B1",
                "plate_number": "P1",
                "capacity": "40",
                "route_id": route.id,
                "status": "active",
            },
            follow_redirects=False,
        )
        self.client.post(
            "/locations",
            data={
                "name": "Main Gate",
                "latitude": "2.31",
                "longitude": "102.32",
                "route_id": route.id,
                "order": "0",
            },
            follow_redirects=False,
        )

        self.assertEqual(self.repo.list_buses()[0].capacity, 40)
        self.assertEqual(self.repo.route_points(route.id)[0].name, "Main Gate")

    def test_invalid_form_shows_message(self):
        response = self.client.post(
            "/buses",
            data={"bus_number": "B1", "plate_number": "P1", "capacity": "lots"},
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 422)
        self.assertIn("capacity", response.text)
        self.assertEqual(self.repo.list_buses(), [])

    def test_missing_form_field_renders_error_page(self):
        response = self.client.post(
            "/drivers", data={"name": "Aina"}, follow_redirects=False
        )
        self.assertEqual(response.status_code, 422)
        self.assertTrue(response.headers["content-type"].startswith("text/html"))
        self.assertIn("email", response.text)
        self.assertEqual(self.repo.list_drivers(), [])

    def test_form_posts_require_a_session(self):
        route = self.repo.create_route(RouteIn(name="Campus Loop"))
        for path, data in (
            ("/routes", {"name": "Night Loop"}),
            ("/buses", {"bus_number": "B1", "plate_number": "P1"}),
            (f"/routes/{route.id}/delete", None),
            (f"/routes/{route.id}/schedule", {"departure_time": "07:45"}),
        ):
            response = self.anonymous.post(path, data=data, follow_redirects=False)
            self.assertEqual(response.status_code, 303, path)
            self.assertEqual(response.headers["location"], "/signin", path)

        self.assertEqual([r.name for r in self.repo.list_routes()], ["Campus Loop"])
        self.assertEqual(self.repo.list_buses(), [])
        self.assertEqual(self.repo.list_schedule(route.id), [])

    def test_incomplete_live_location_does_not_break_screens(self):
        bus = self.repo.create_bus(BusIn(bus_number="B12", plate_number="WXY 1234"))
        self.repo.publish_live_location(
            bus.id, LiveLocationIn(latitude=2.31, longitude=102.32)
        )
        get_realtime_store().set(
            "busLocations/bus9", {"latitude": 1.0, "longitude": 2.0}
        )
        for path in ("/dashboard-default", "/bus-location"):
            response = self.client.get(path)
            self.assertEqual(response.status_code, 200, path)
        self.assertIn("B12", self.client.get("/bus-location").text)

    def test_schedule_add_and_delete(self):
        route = self.repo.create_route(RouteIn(name="Campus Loop"))
        response = self.client.post(
            f"/routes/{route.id}/schedule",
            data={"departure_time": "07:45", "day_type": "daily"},
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], f"/routes/{route.id}/schedule")

        entry = self.repo.list_schedule(route.id)[0]
        self.assertIn("07:45", self.client.get(f"/routes/{route.id}/schedule").text)

        self.client.post(
            f"/routes/{route.id}/schedule/{entry.id}/delete", follow_redirects=False
        )
        self.assertEqual(self.repo.list_schedule(route.id), [])

    def test_unknown_route_schedule_surfaces_backend_message(self):
        response = self.client.get("/routes/missing/schedule")
        self.assertEqual(response.status_code, 404)
        self.assertIn("Route missing not found", response.text)

    def test_profile_requires_session(self):
        response = self.anonymous.get("/profile", follow_redirects=False)
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/signin")

    def test_sign_up_sign_in_and_update_profile(self):
        response = self._sign_up_and_in()
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/dashboard-default")

        profile = self.client.get("/profile")
        self.assertEqual(profile.status_code, 200)
        self.assertIn("staff@example.com", profile.text)

        self.client.post(
            "/profile",
            data={"display_name": "Operations", "phone": "+60123"},
            follow_redirects=False,
        )
        self.assertIn("Operations", self.client.get("/profile").text)

    def test_sign_in_failure_rerenders_form(self):
        response = self.client.post(
            "/signin",
            data={"email": "nobody@example.com", "password": "secret1"},
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 401)
        self.assertIn("INVALID_LOGIN_CREDENTIALS", response.text)

    def test_duplicate_sign_up_rerenders_form(self):
        self._sign_up_and_in()
        response = self.client.post(
            "/signup",
            data={"email": "staff@example.com", "password": "secret1"},
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 409)
        self.assertIn("already exists", response.text)

    def test_sign_out_clears_cookie(self):
        self._sign_up_and_in()
        response = self.client.post("/signout", follow_redirects=False)
        self.assertEqual(response.status_code, 303)
        self.assertIn("Max-Age=0", response.headers["set-cookie"])


if __name__ == "__main__":
    unittest.main()

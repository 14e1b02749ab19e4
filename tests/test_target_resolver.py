import unittest
from types import SimpleNamespace

from fastapi import APIRouter

from query_filter.core.config import ParserConfig
from query_filter.core.exceptions import TargetNotFoundError
from query_filter.services.registry import CollectionRegistry
from query_filter.services.routing import ControllerRoute, RouteController, controller_from_route
from query_filter.services.target_resolver import (
    RequestContext,
    TargetResolver,
    controller_candidate,
    path_candidate,
)
from tests.mocks.controllers import MockModelController
from tests.mocks.models import MockClosureModel, MockModel, MockNotModel

MOCKS = "tests.mocks"


class UnknownThingController(RouteController):
    pass


class WidgetCONTROLLER(RouteController):
    pass


class Gadget(RouteController):
    pass


class CandidateTests(unittest.TestCase):
    def test_controller_suffix_is_stripped_case_insensitively(self):
        self.assertEqual(controller_candidate(MockModelController()), "MockModel")
        self.assertEqual(controller_candidate(WidgetCONTROLLER()), "Widget")
        self.assertEqual(controller_candidate(Gadget()), "Gadget")

    def test_path_candidate_is_pascal_cased_last_segment(self):
        self.assertEqual(path_candidate("some_model"), "SomeModel")
        self.assertEqual(path_candidate("/api/collections/mock_model?filter[x][is]=1"), "MockModel")
        self.assertEqual(path_candidate("/API/Mock_NOT_Model/"), "MockNotModel")
        self.assertEqual(path_candidate("/api/users"), "Users")
        self.assertEqual(path_candidate(""), "")
        self.assertEqual(path_candidate("/"), "")


class ControllerFromRouteTests(unittest.TestCase):
    def test_route_object_with_controller(self):
        controller = MockModelController()
        self.assertIs(controller_from_route(SimpleNamespace(controller=controller)), controller)

    def test_route_object_without_route_controller(self):
        self.assertIsNone(controller_from_route(SimpleNamespace(controller=MockNotModel())))
        self.assertIsNone(controller_from_route(SimpleNamespace()))
        self.assertIsNone(controller_from_route(None))

    def test_tuple_with_closure_has_no_controller(self):
        self.assertIsNone(controller_from_route((lambda: None, "auth")))
        self.assertIsNone(controller_from_route(()))

    def test_tuple_with_type_and_method_string(self):
        controller = controller_from_route(("tests.mocks.controllers.MockModelController@index", "auth"))
        self.assertIsInstance(controller, MockModelController)

    def test_mapping_descriptor_with_uses(self):
        controller = controller_from_route({"uses": "tests.mocks.controllers.MockModelController@index"})
        self.assertIsInstance(controller, MockModelController)
        self.assertIsNone(controller_from_route([{"uses": lambda: None}]))

    def test_non_controller_or_unknown_type_is_ignored(self):
        self.assertIsNone(controller_from_route(("tests.mocks.controllers.MockNotController@index",)))
        self.assertIsNone(controller_from_route(("tests.mocks.controllers.Missing@index",)))

    def test_controller_route_records_owner_of_bound_endpoint(self):
        router = APIRouter()
        controller = MockModelController()
        controller.register(router, "/widgets")
        route = router.routes[-1]
        self.assertIsInstance(route, ControllerRoute)
        self.assertIs(route.controller, controller)
        self.assertIs(controller_from_route(route), controller)

    def test_controller_route_with_plain_function(self):
        router = APIRouter(route_class=ControllerRoute)

        @router.get("/plain")
        def plain():
            return {}

        self.assertIsNone(router.routes[-1].controller)


class TargetResolverTests(unittest.TestCase):
    def setUp(self):
        self.registry = CollectionRegistry({MOCKS: [MockModel, MockClosureModel, MockNotModel]})
        self.resolver = TargetResolver(ParserConfig(model_namespaces=[MOCKS]), self.registry)

    def test_model_override_wins_over_everything(self):
        context = RequestContext(path="/mock_closure_model", route=SimpleNamespace(controller=MockModelController()))
        self.assertEqual(
            self.resolver.resolve(context, model_name="anything.Custom", table_name="mock_models"),
            "anything.Custom",
        )

    def test_table_override_wins_over_route_and_path(self):
        context = RequestContext(path="/mock_closure_model", route=SimpleNamespace(controller=MockModelController()))
        self.assertEqual(self.resolver.resolve(context, table_name="mock_models"), "mock_models")

    def test_controller_wins_over_path(self):
        context = RequestContext(path="/mock_closure_model", route=SimpleNamespace(controller=MockModelController()))
        self.assertEqual(self.resolver.resolve(context), "tests.mocks.MockModel")

    def test_path_used_when_controller_does_not_resolve(self):
        context = RequestContext(path="/mock_closure_model", route=SimpleNamespace(controller=UnknownThingController()))
        self.assertEqual(self.resolver.resolve(context), "tests.mocks.MockClosureModel")

    def test_path_used_for_closure_routes(self):
        context = RequestContext(path="mock_closure_model", route=(lambda: None,))
        self.assertEqual(self.resolver.resolve(context), "tests.mocks.MockClosureModel")

    def test_first_configured_namespace_wins(self):
        self.registry.register("other.ns", MockModel)
        resolver = TargetResolver(ParserConfig(model_namespaces=["other.ns", MOCKS]), self.registry)
        self.assertEqual(resolver.resolve(RequestContext(path="/mock_model")), "other.ns.MockModel")

    def test_failure_lists_every_attempt_in_search_order(self):
        resolver = TargetResolver(ParserConfig(model_namespaces=[MOCKS, "other.ns"]), self.registry)
        context = RequestContext(path="/api/nothing_here?x=1", route=SimpleNamespace(controller=UnknownThingController()))
        with self.assertRaises(TargetNotFoundError) as ctx:
            resolver.resolve(context)
        expected = [
            "tests.mocks.UnknownThing",
            "other.ns.UnknownThing",
            "tests.mocks.NothingHere",
            "other.ns.NothingHere",
        ]
        self.assertEqual(ctx.exception.attempted, expected)
        self.assertEqual(str(ctx.exception), "Model not found after looking on " + ", ".join(expected))

    def test_failure_log_carries_request_id(self):
        context = RequestContext(path="/nothing_here", request_id="req-42")
        with self.assertLogs("query_filter.resolver", level="INFO") as logs:
            with self.assertRaises(TargetNotFoundError):
                self.resolver.resolve(context)
        self.assertTrue(any("request_id=req-42" in line for line in logs.output))

    def test_failure_without_controller_lists_path_candidate_only(self):
        resolver = TargetResolver(ParserConfig(), CollectionRegistry())
        with self.assertRaises(TargetNotFoundError) as ctx:
            resolver.resolve(RequestContext(path="non_exists_model"))
        self.assertEqual(ctx.exception.attempted, ["app.models.NonExistsModel"])


if __name__ == "__main__":
    unittest.main()

"""
Tests for the keyword query planner.

Run with: python -m cartographer.tests.test_query_planner
"""

from cartographer.nlp import PlanIntent, QueryPlanner, detect_plan_intent, extract_function_name


def _plan(question):
    return QueryPlanner().plan(question)


def test_blast_radius_plans():
    plan = _plan("what breaks if I change parse_config")
    assert plan.intent == PlanIntent.BLAST_RADIUS
    assert plan.function_name == "parse_config"

    plan = _plan("What is the blast radius of computeTotal?")
    assert plan.intent == PlanIntent.BLAST_RADIUS
    assert plan.function_name == "computeTotal"

    print("Blast radius plans: PASSED")


def test_blast_radius_without_name_keeps_intent():
    plan = _plan("what is the blast radius")
    assert plan.intent == PlanIntent.BLAST_RADIUS
    assert plan.function_name is None

    print("Blast radius without name: PASSED")


def test_ranking_plans():
    assert _plan("show the most called functions").intent == PlanIntent.CENTRAL_FUNCTIONS
    assert _plan("what are the important files").intent == PlanIntent.IMPORTANT_FILES
    assert _plan("show the most called functions").function_name is None

    print("Ranking plans: PASSED")


def test_find_function_plans():
    plan = _plan("where is load_settings defined")
    assert plan.intent == PlanIntent.FIND_FUNCTION
    assert plan.function_name == "load_settings"

    plan = _plan("find `Parser.parse`")
    assert plan.intent == PlanIntent.FIND_FUNCTION
    assert plan.function_name == "parse"

    plan = _plan("find function tokenize")
    assert plan.function_name == "tokenize"

    print("Find function plans: PASSED")


def test_unknown():
    plan = _plan("tell me a joke")
    assert plan.intent == PlanIntent.UNKNOWN
    assert plan.function_name is None
    assert _plan("").intent == PlanIntent.UNKNOWN

    print("Unknown: PASSED")


def test_extract_function_name():
    assert extract_function_name("what happens to main() if this goes") == "main"
    assert extract_function_name("the build_graph function") == "build_graph"
    assert extract_function_name("nothing here at all") is None

    print("Function name extraction: PASSED")


def test_detect_plan_intent_is_case_insensitive():
    assert detect_plan_intent("BLAST RADIUS of X") == PlanIntent.BLAST_RADIUS
    assert detect_plan_intent("Most Imported modules") == PlanIntent.IMPORTANT_FILES

    print("Case-insensitive detection: PASSED")


def run_tests():
    """Run all tests."""
    print("=" * 60)
    print("QUERY PLANNER TESTS")
    print("=" * 60)

    test_blast_radius_plans()
    test_blast_radius_without_name_keeps_intent()
    test_ranking_plans()
    test_find_function_plans()
    test_unknown()
    test_extract_function_name()
    test_detect_plan_intent_is_case_insensitive()

    print("\nALL TESTS PASSED")


if __name__ == "__main__":
    run_tests()

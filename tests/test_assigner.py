from __future__ import annotations

import pytest

from stableids import IdOptions, Module, assign_module_ids, select_modules
from stableids.assigner import HashedIdAssigner, shortest_free_prefix
from stableids.exceptions import IdSpaceExhaustedError

from ._graph_test_utils import build_compilation, full_digest


def _same_name(_module, _context, _root):
    return "shared/name.js"


class _FixedDigestAssigner(HashedIdAssigner):
    def __init__(self, digests: dict[str, str], options: IdOptions):
        super().__init__(options, name_of=lambda module, _context, _root: module.identifier)
        self._digests = digests

    def digest_for(self, name: str) -> str:
        return self._digests[name]


def test_assigns_prefix_of_short_name_digest() -> None:
    compilation = build_compilation(["/app/src/index.js", "/app/src/util.js"])
    assigned = assign_module_ids(compilation.modules, compilation, IdOptions())

    assert assigned == {
        "/app/src/index.js": full_digest("./src/index.js")[:4],
        "/app/src/util.js": full_digest("./src/util.js")[:4],
    }
    for module in compilation.modules:
        assert compilation.chunk_graph.get_module_id(module) == assigned[module.identifier]


def test_ids_do_not_depend_on_checkout_location() -> None:
    first = build_compilation(["/home/a/app/src/index.js"], context="/home/a/app")
    second = build_compilation(["/ci/build/src/index.js"], context="/ci/build")

    ids_first = assign_module_ids(first.modules, first)
    ids_second = assign_module_ids(second.modules, second)

    assert list(ids_first.values()) == list(ids_second.values())


def test_skips_modules_without_chunks_or_need() -> None:
    compilation = build_compilation(
        ["/app/a.js", "/app/orphan.js"],
        chunked=["/app/a.js"],
    )
    no_need = compilation.add_module(Module("/app/runtime.js", needs_id=False))
    compilation.chunk_graph.connect_chunk_and_module("main", no_need)

    assigned = assign_module_ids(compilation.modules, compilation)

    assert set(assigned) == {"/app/a.js"}
    assert compilation.chunk_graph.get_module_id(compilation.get_module("/app/orphan.js")) is None
    assert compilation.chunk_graph.get_module_id(no_need) is None


def test_existing_ids_are_never_overwritten_and_stay_reserved() -> None:
    compilation = build_compilation(["/app/a.js", "/app/b.js"])
    a = compilation.get_module("/app/a.js")
    taken = full_digest("./b.js")[:4]
    compilation.chunk_graph.set_module_id(a, taken)

    assigned = assign_module_ids(compilation.modules, compilation)

    assert "/app/a.js" not in assigned
    assert compilation.chunk_graph.get_module_id(a) == taken
    assert assigned["/app/b.js"] == full_digest("./b.js")[:5]


def test_reserved_ids_force_growth() -> None:
    prefix = full_digest("./a.js")[:4]
    compilation = build_compilation(["/app/a.js"], reserved_ids=[prefix])

    assigned = assign_module_ids(compilation.modules, compilation)

    assert assigned["/app/a.js"] == full_digest("./a.js")[:5]


def test_later_module_grows_on_prefix_collision() -> None:
    compilation = build_compilation(["a/b.js", "x/y.js"])
    assigner = _FixedDigestAssigner({"a/b.js": "AbCd1234", "x/y.js": "AbCdEFGH"}, IdOptions())

    assigned = assigner.assign(compilation.modules, compilation)

    assert assigned == {"a/b.js": "AbCd", "x/y.js": "AbCdE"}


def test_growth_checks_longer_prefix_against_used_ids() -> None:
    compilation = build_compilation(["a/b.js", "x/y.js"], reserved_ids=["AbCdE"])
    assigner = _FixedDigestAssigner({"a/b.js": "AbCd1234", "x/y.js": "AbCdEFGH"}, IdOptions())

    assigned = assigner.assign(compilation.modules, compilation)

    assert assigned["x/y.js"] == "AbCdEF"


def test_collision_loser_follows_pre_order_rank() -> None:
    compilation = build_compilation(["/app/z.js", "/app/a.js"])
    z, a = compilation.get_module("/app/z.js"), compilation.get_module("/app/a.js")
    compilation.module_graph.set_pre_order_index(z, 0)
    compilation.module_graph.set_pre_order_index(a, 1)

    assigned = assign_module_ids(compilation.modules, compilation, name_of=_same_name)

    digest = full_digest("shared/name.js")
    assert assigned["/app/z.js"] == digest[:4]
    assert assigned["/app/a.js"] == digest[:5]


def test_unranked_modules_order_by_identifier() -> None:
    compilation = build_compilation(["/app/b.js", "/app/c.js", "/app/a.js"])
    ranked = compilation.get_module("/app/c.js")
    compilation.module_graph.set_pre_order_index(ranked, 7)

    ordered = select_modules(compilation.modules, compilation)

    assert [module.identifier for module in ordered] == ["/app/c.js", "/app/a.js", "/app/b.js"]


def test_empty_and_missing_names_hash_the_empty_string() -> None:
    compilation = build_compilation(["/app/a.js", "/app/b.js"])

    assigned = assign_module_ids(
        compilation.modules,
        compilation,
        name_of=lambda module, _context, _root: None if module.identifier.endswith("a.js") else "",
    )

    assert full_digest("") == "1B2M2Y8AsgTpgAmY7PhCfg=="
    assert assigned["/app/a.js"] == "1B2M"
    assert assigned["/app/b.js"] == "1B2M2"


def test_failing_name_collaborator_degrades_to_empty_name() -> None:
    def broken(_module, _context, _root):
        raise RuntimeError("no name")

    compilation = build_compilation(["/app/a.js"])
    assigned = assign_module_ids(compilation.modules, compilation, name_of=broken)

    assert assigned["/app/a.js"] == "1B2M"


def test_exhausted_digest_space_raises() -> None:
    options = IdOptions(hash_digest="hex", hash_digest_length=31)
    compilation = build_compilation(["/app/a.js", "/app/b.js", "/app/c.js"])

    with pytest.raises(IdSpaceExhaustedError) as exc_info:
        assign_module_ids(compilation.modules, compilation, options, name_of=_same_name)

    assert exc_info.value.details["module"] == "/app/c.js"
    assert exc_info.value.details["max_length"] == 32
    assert '"error_type": "IdSpaceExhaustedError"' in exc_info.value.to_payload()


def test_options_context_overrides_compilation_context() -> None:
    seen: list[str] = []

    def record(module, context, _root):
        seen.append(context)
        return module.identifier

    compilation = build_compilation(["/app/a.js"])
    assign_module_ids(compilation.modules, compilation, IdOptions(context="/elsewhere"), name_of=record)

    assert seen == ["/elsewhere"]


def test_second_pass_is_idempotent() -> None:
    compilation = build_compilation(["/app/a.js", "/app/b.js"])
    first = assign_module_ids(compilation.modules, compilation)
    second = assign_module_ids(compilation.modules, compilation)

    assert first
    assert second == {}


@pytest.mark.parametrize(
    ("digest", "used", "start", "expected"),
    [
        ("AbCdEFGH", set(), 4, "AbCd"),
        ("AbCdEFGH", {"AbCd", "AbCdE"}, 4, "AbCdEF"),
        ("AbCd", {"AbCd"}, 4, None),
        ("Ab", set(), 4, "Ab"),
    ],
)
def test_shortest_free_prefix(digest: str, used: set[str], start: int, expected) -> None:
    assert shortest_free_prefix(digest, used, start) == expected

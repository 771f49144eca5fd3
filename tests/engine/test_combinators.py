"""Tests for If / After / AfterIf / Catch (``sequent.engine.combinators``).

Each combinator is exercised standalone with an explicit ``next`` and inside
a ``Pipeline``, where ``next`` is the rest of the enclosing list.
"""

import pytest

from sequent.engine.combinators import After, AfterIf, Catch, If
from sequent.engine.middleware import Stack
from sequent.engine.outcome import Outcome
from sequent.engine.pipeline import Pipeline
from sequent.engine.testing import assert_called, assert_not_called


def make_next(recorder, name="next", raises=None):
    async def next():
        recorder.calls.append(name)
        if raises is not None:
            raise raises

    return next


async def yes(ctx):
    return True


async def no(ctx):
    return False


class TestIf:
    @pytest.mark.asyncio
    async def test_positive_predicate_runs_children_then_next(self, recorder):
        await If(yes, [recorder.task("child")]).process({}, make_next(recorder))

        assert_called(recorder, "child", "next")

    @pytest.mark.asyncio
    async def test_negative_predicate_calls_next_only(self, recorder):
        await If(no, [recorder.step("child")]).process({}, make_next(recorder))

        assert_called(recorder, "next")

    @pytest.mark.asyncio
    async def test_error_from_next_propagates(self, recorder):
        error = RuntimeError("next failed")
        _if = If(no, [recorder.step("child")])

        with pytest.raises(RuntimeError) as exc_info:
            await _if.process({}, make_next(recorder, raises=error))

        assert exc_info.value is error
        assert_not_called(recorder, "child")

    @pytest.mark.asyncio
    async def test_terminate_skips_next(self, recorder):
        await If(yes, [recorder.task("child")], True).process({}, make_next(recorder))

        assert_called(recorder, "child")

    @pytest.mark.asyncio
    async def test_terminate_without_children(self, recorder):
        _if = If(yes, True)

        await _if.process({}, make_next(recorder))

        assert _if.terminate is True
        assert _if.children == ()
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_sync_predicate_sees_context(self, recorder):
        _if = If(lambda ctx: ctx["admin"], [recorder.task("grant")])

        await _if.process({"admin": False})
        await _if.process({"admin": True})

        assert_called(recorder, "grant")

    @pytest.mark.asyncio
    async def test_predicate_failure_propagates(self, recorder):
        def broken(ctx):
            raise KeyError("admin")

        with pytest.raises(KeyError):
            await If(broken, [recorder.task("child")]).process({}, make_next(recorder))

        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_in_pipeline_false_continues_list(self, recorder):
        app = Pipeline().use(If(no, [recorder.task("child")])).use(recorder.task("after"))

        outcome = await app.process({})

        assert outcome == Outcome.proceed()
        assert_called(recorder, "after")

    @pytest.mark.asyncio
    async def test_in_pipeline_terminate_abandons_rest(self, recorder):
        app = Pipeline()
        app.use(recorder.task("before"))
        app.use(If(yes, [recorder.task("child")], terminate=True))
        app.use(recorder.task("after"))

        outcome = await app.process({})

        assert outcome.aborted
        assert_called(recorder, "before", "child")

    @pytest.mark.asyncio
    async def test_in_pipeline_children_then_rest(self, recorder):
        app = Pipeline().use(If(yes, [recorder.task("child")])).use(recorder.task("after"))

        await app.process({})

        assert_called(recorder, "child", "after")


class TestAfter:
    @pytest.mark.asyncio
    async def test_children_run_after_next(self, recorder):
        await After([recorder.task("child")]).process({}, make_next(recorder))

        assert_called(recorder, "next", "child")

    @pytest.mark.asyncio
    async def test_error_in_next_skips_children(self, recorder):
        after = After([recorder.task("child")])

        with pytest.raises(RuntimeError):
            await after.process({}, make_next(recorder, raises=RuntimeError("x")))

        assert_called(recorder, "next")

    @pytest.mark.asyncio
    async def test_in_pipeline_runs_after_rest(self, recorder):
        app = Pipeline()
        app.use(recorder.task("first"))
        app.use(After([recorder.task("audit")]))
        app.use(recorder.task("handle"))

        await app.process({})

        assert_called(recorder, "first", "handle", "audit")

    @pytest.mark.asyncio
    async def test_in_stack_runs_after_rest(self, recorder):
        stack = Stack().use(After([recorder.task("audit")])).use(recorder.task("handle"))

        await stack.process({})

        assert_called(recorder, "handle", "audit")


class TestAfterIf:
    @pytest.mark.asyncio
    async def test_predicate_sees_mutated_context(self, recorder):
        ctx = {}

        async def handled():
            ctx["status"] = 200

        after_if = AfterIf(lambda c: c.get("status") == 200, [recorder.task("log")])

        await after_if.process(ctx, handled)

        assert_called(recorder, "log")

    @pytest.mark.asyncio
    async def test_negative_predicate_skips_children(self, recorder):
        await AfterIf(no, [recorder.task("log")]).process({}, make_next(recorder))

        assert_called(recorder, "next")

    @pytest.mark.asyncio
    async def test_in_pipeline(self, recorder):
        app = Pipeline()
        app.use(AfterIf(lambda ctx: ctx.get("found"), [recorder.task("cache")]))
        app.use(recorder.task("lookup", mutate=lambda ctx: ctx.update(found=True)))

        await app.process({})

        assert_called(recorder, "lookup", "cache")


class TestCatch:
    @pytest.mark.asyncio
    async def test_catches_errors(self, recorder):
        seen = []
        expected = ValueError("foo bar")

        async def on_error(err, ctx):
            seen.append(err)

        _catch = Catch(on_error).use(recorder.task("boom", raises=expected))
        await _catch.process({}, make_next(recorder))

        assert seen == [expected]
        assert_called(recorder, "boom")

    @pytest.mark.asyncio
    async def test_can_rethrow(self):
        expected = ValueError("foo bar")

        def fail(ctx):
            raise expected

        def on_error(err, ctx):
            raise err

        _catch = Catch(on_error, [fail])

        with pytest.raises(ValueError) as exc_info:
            await _catch.process({})

        assert exc_info.value is expected

    @pytest.mark.asyncio
    async def test_guards_next(self, recorder):
        caught = []
        _catch = Catch(lambda err, ctx: caught.append(str(err)), [recorder.task("child")])

        await _catch.process({}, make_next(recorder, raises=RuntimeError("downstream")))

        assert_called(recorder, "child", "next")
        assert caught == ["downstream"]

    @pytest.mark.asyncio
    async def test_no_error_no_callback(self, recorder):
        _catch = Catch(lambda err, ctx: recorder.calls.append("on_error"), [recorder.task("child")])

        await _catch.process({}, make_next(recorder))

        assert_called(recorder, "child", "next")

    @pytest.mark.asyncio
    async def test_in_pipeline_catches_rest_of_list(self, recorder):
        def report(err, ctx):
            ctx["error"] = str(err)

        ctx = {}
        app = Pipeline()
        app.use(Catch(report))
        app.use(recorder.task("boom", raises=RuntimeError("boom")))
        app.use(recorder.task("skipped"))

        outcome = await app.process(ctx)

        assert outcome == Outcome.proceed()
        assert ctx["error"] == "boom"
        assert_called(recorder, "boom")

    @pytest.mark.asyncio
    async def test_in_pipeline_handled_errors_not_reported(self, recorder):
        app = Pipeline()
        app.use(Catch(lambda err, ctx: recorder.calls.append("report")))
        app.use(recorder.task("boom", raises=RuntimeError("boom")))
        app.use(recorder.error("recover", returns=True))

        await app.process({})

        assert_called(recorder, "boom", "recover")

    @pytest.mark.asyncio
    async def test_nested_combinators(self, recorder):
        app = Pipeline()
        app.use(
            Catch(
                lambda err, ctx: recorder.calls.append(f"caught:{err}"),
                [
                    If(lambda ctx: ctx.get("admin"), [recorder.task("grant")], terminate=True),
                    recorder.task("load", raises=PermissionError("denied")),
                ],
            )
        )
        app.use(recorder.task("after"))

        await app.process({"admin": False})

        assert_called(recorder, "load", "caught:denied")

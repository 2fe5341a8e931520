"""Statement interpreter: walks Go function bodies and records the trace."""

from __future__ import annotations

import logging
from typing import Callable, Iterator

from . import constants
from .context import RunContext
from .environment import CallFrame, Environment
from .evaluator import ExpressionEvaluator
from .formatting import format_call, format_value
from .operators import Operators, write_index
from .registry import FunctionDecl
from .syntax import (
    block_statements,
    call_parts,
    display_text,
    expression_list,
    is_noise,
    node_text,
    selector_parts,
    type_label,
)
from .trace_types import ExecutionTrace, LoopIteration, StatementKind
from .values import (
    ABSENT,
    BoolValue,
    FloatValue,
    IntValue,
    MapValue,
    SliceValue,
    StrValue,
    Value,
    coerce_untyped,
    matches_type,
    type_label_of,
    wrap_int64,
    zero_value,
)

logger = logging.getLogger(__name__)

_BREAK = "break"
_CONTINUE = "continue"


def _first_named(node):
    return next((c for c in node.named_children if not is_noise(c)), None)


def _range_pairs(collection: Value) -> Iterator[tuple[Value, Value]]:
    """(key, value) pairs of a range loop, fixed at loop entry."""
    if isinstance(collection, SliceValue):
        items = collection.items
        for i in range(len(items)):
            yield IntValue(i), items[i]
    elif isinstance(collection, MapValue):
        yield from list(collection.entries.items())
    elif isinstance(collection, IntValue):
        for i in range(max(collection.value, 0)):
            yield IntValue(i), ABSENT
    elif isinstance(collection, StrValue):
        offset = 0
        for ch in collection.value:
            yield IntValue(offset), IntValue(ord(ch))
            offset += len(ch.encode("utf-8"))


def _step_number(value: Value, delta: int) -> Value:
    if isinstance(value, IntValue):
        return IntValue(wrap_int64(value.value + delta))
    if isinstance(value, FloatValue):
        return FloatValue(value.value + delta)
    return ABSENT


class Interpreter:
    """Executes one program against a RunContext.

    Every executed construct appends steps through the context's recorder.
    Statement kinds without a handler are skipped and record nothing.
    """

    def __init__(self, ctx: RunContext):
        self._ctx = ctx
        self._evaluator = ExpressionEvaluator(ctx, self.invoke)
        self._STMT_DISPATCH: dict[str, Callable] = {
            "short_var_declaration": self._exec_short_var_decl,
            "assignment_statement": self._exec_assignment,
            "var_declaration": self._exec_declaration,
            "const_declaration": self._exec_declaration,
            "if_statement": self._exec_if,
            "for_statement": self._exec_for,
            "inc_statement": self._exec_inc_dec,
            "dec_statement": self._exec_inc_dec,
            "return_statement": self._exec_return,
            "break_statement": self._exec_break,
            "continue_statement": self._exec_continue,
            "expression_statement": self._exec_expression_statement,
            "labeled_statement": self._exec_labeled,
            "block": self.execute_block,
        }

    @property
    def evaluator(self) -> ExpressionEvaluator:
        return self._evaluator

    # ── entry points ─────────────────────────────────────────────

    def run(self) -> ExecutionTrace:
        """Execute the entry function and return the complete trace."""
        ctx = self._ctx
        entry = ctx.functions.entry
        if entry is None:
            logger.warning(
                "No %s function found; nothing to trace", ctx.config.entry_function
            )
            return self._finish()
        ctx.call_stack = [CallFrame(function_name=entry.name)]
        ctx.env = Environment.for_function(entry.name)
        try:
            self.execute_block(entry.body)
        except RecursionError:
            self._stack_exhausted(entry.name)
        return self._finish()

    def _finish(self) -> ExecutionTrace:
        ctx = self._ctx
        final_output = "".join(ctx.output)
        ctx.stats.steps = len(ctx.recorder)
        ctx.stats.output_bytes = len(final_output.encode("utf-8"))
        return ExecutionTrace(
            steps=ctx.recorder.steps, final_output=final_output, stats=ctx.stats
        )

    def execute_block(self, node):
        if node is None:
            return
        for stmt in block_statements(node):
            if self._ctx.interrupted:
                return
            self.execute(stmt)

    def execute(self, node):
        handler = self._STMT_DISPATCH.get(node.type)
        if handler is not None:
            handler(node)

    def _text(self, node) -> str:
        return node_text(node, self._ctx.source)

    def _display(self, node) -> str:
        return display_text(node, self._ctx.source)

    # ── call protocol ────────────────────────────────────────────

    def invoke(self, decl: FunctionDecl, arg_nodes: list, call_node) -> Value:
        """Call a user function, returning its result or ABSENT.

        At the depth limit the call is abandoned after recording a single
        ``func_call`` step; no frame is pushed.  Running out of Python stack
        inside the callee abandons it the same way, without the marker step.
        """
        ctx = self._ctx
        if ctx.depth >= ctx.config.max_call_depth:
            ctx.stats.depth_cutoffs += 1
            logger.debug(
                "Call depth %d reached; abandoning call to %s", ctx.depth, decl.name
            )
            ctx.record(
                call_node,
                StatementKind.FUNC_CALL,
                f"{decl.name}(...) ({constants.MAX_DEPTH_MARKER})",
            )
            return ABSENT

        args = self._evaluator.evaluate_all(arg_nodes)
        rendered = ", ".join(format_value(a) for a in args)
        ctx.record(call_node, StatementKind.FUNC_CALL, f"{decl.name}({rendered})")

        frame = CallFrame(
            function_name=decl.name,
            saved_env=ctx.env.clone(),
            saved_returned=ctx.has_returned,
            saved_return_value=ctx.return_value,
            saved_loop_signal=ctx.loop_signal,
        )
        caller_depth = ctx.depth
        ctx.call_stack.append(frame)
        ctx.stats.function_calls += 1
        ctx.stats.max_depth = max(ctx.stats.max_depth, ctx.depth)

        try:
            ctx.env = Environment.for_function(decl.name)
            self._bind_parameters(decl, args)
            if decl.body is not None:
                ctx.record(decl.body, StatementKind.FUNC_ENTER, f"enter {decl.name}")

            ctx.has_returned = False
            ctx.return_value = ABSENT
            ctx.loop_signal = ""
            self.execute_block(decl.body)
            result = ctx.return_value
        except RecursionError:
            self._stack_exhausted(decl.name)
            result = ABSENT

        del ctx.call_stack[caller_depth:]
        ctx.env = frame.saved_env
        ctx.has_returned = frame.saved_returned
        ctx.return_value = frame.saved_return_value
        ctx.loop_signal = frame.saved_loop_signal
        return result

    def _stack_exhausted(self, function_name: str):
        self._ctx.stats.depth_cutoffs += 1
        logger.debug("Python stack exhausted in %s; abandoning the call", function_name)

    def _bind_parameters(self, decl: FunctionDecl, args: list[Value]):
        env = self._ctx.env
        for i, param in enumerate(decl.parameters):
            if param.variadic:
                value = self._pack_variadic(param.type_label, args[i:])
            elif i < len(args):
                value = args[i]
            else:
                continue
            if param.name != constants.DISCARD_NAME:
                env.write(param.name, value, param.type_label)

    @staticmethod
    def _pack_variadic(label: str, rest: list[Value]) -> Value:
        elem_type = label[len(constants.SLICE_TYPE_PREFIX) :]
        if (
            len(rest) == 1
            and isinstance(rest[0], SliceValue)
            and rest[0].elem_type == elem_type
        ):
            return rest[0]
        return SliceValue(
            elem_type=elem_type, items=[v for v in rest if matches_type(v, elem_type)]
        )

    # ── bindings ─────────────────────────────────────────────────

    def _exec_short_var_decl(self, node):
        ctx = self._ctx
        names = expression_list(node.child_by_field_name("left"))
        values = self._evaluator.evaluate_all(
            expression_list(node.child_by_field_name("right"))
        )
        for name_node, value in zip(names, values):
            name = self._text(name_node)
            if name != constants.DISCARD_NAME:
                ctx.env.write(name, value, type_label_of(value))
        ctx.record(node, StatementKind.DECLARE, self._display(node))

    def _exec_assignment(self, node):
        ctx = self._ctx
        targets = expression_list(node.child_by_field_name("left"))
        values = self._evaluator.evaluate_all(
            expression_list(node.child_by_field_name("right"))
        )
        op_node = node.child_by_field_name("operator")
        op = self._text(op_node) if op_node is not None else "="
        for target, value in zip(targets, values):
            if op != "=":
                current = self._evaluator.evaluate(target)
                value = Operators.eval_binop(op[:-1], current, value)
            self._store(target, value)
        ctx.record(node, StatementKind.ASSIGN, self._display(node))

    def _store(self, target, value: Value):
        if target.type == "identifier":
            name = self._text(target)
            if name != constants.DISCARD_NAME:
                self._ctx.env.write(name, value, type_label_of(value))
        elif target.type == "index_expression":
            container = self._evaluator.evaluate(target.child_by_field_name("operand"))
            key = self._evaluator.evaluate(target.child_by_field_name("index"))
            write_index(container, key, value)
        elif target.type == "parenthesized_expression":
            inner = _first_named(target)
            if inner is not None:
                self._store(inner, value)

    def _declaration_specs(self, node) -> list:
        specs = []
        for child in node.named_children:
            if child.type in ("var_spec", "const_spec"):
                specs.append(child)
            elif child.type in ("var_spec_list", "const_spec_list"):
                specs.extend(
                    c for c in child.named_children if c.type in ("var_spec", "const_spec")
                )
        return specs

    def _exec_declaration(self, node):
        """``var`` / ``const``: one ``declare`` step per declaration statement."""
        ctx = self._ctx
        for spec in self._declaration_specs(node):
            type_node = spec.child_by_field_name("type")
            declared = type_label(type_node, ctx.source) if type_node else ""
            values = self._evaluator.evaluate_all(
                expression_list(spec.child_by_field_name("value"))
            )
            names = [n for n in spec.children_by_field_name("name") if n.is_named]
            for i, name_node in enumerate(names):
                if i < len(values):
                    value = coerce_untyped(values[i], declared)
                else:
                    value = zero_value(declared)
                name = self._text(name_node)
                if name != constants.DISCARD_NAME:
                    ctx.env.write(name, value, declared or type_label_of(value))
        ctx.record(node, StatementKind.DECLARE, self._display(node))

    def _exec_inc_dec(self, node):
        ctx = self._ctx
        target = _first_named(node)
        delta = 1 if node.type == "inc_statement" else -1
        if target is not None:
            updated = _step_number(self._evaluator.evaluate(target), delta)
            if updated is not ABSENT:
                if target.type == "identifier" and ctx.env.has(self._text(target)):
                    name = self._text(target)
                    ctx.env.write(name, updated, ctx.env.type_of(name))
                else:
                    self._store(target, updated)
        ctx.record(node, StatementKind.ASSIGN, self._display(node))

    # ── control flow ─────────────────────────────────────────────

    def _exec_if(self, node):
        ctx = self._ctx
        initializer = node.child_by_field_name("initializer")
        if initializer is not None:
            self.execute(initializer)
        cond_node = node.child_by_field_name("condition")
        ctx.record(node, StatementKind.IF_COND, f"if {self._display(cond_node)}")
        cond = self._evaluator.evaluate(cond_node)
        if isinstance(cond, BoolValue) and cond.value:
            self.execute_block(node.child_by_field_name("consequence"))
            return
        alternative = node.child_by_field_name("alternative")
        if alternative is None:
            return
        if alternative.type == "if_statement":
            self._exec_if(alternative)
        else:
            self.execute_block(alternative)

    def _exec_for(self, node):
        body = node.child_by_field_name("body")
        clause = next(
            (
                c
                for c in node.named_children
                if c.type != "block" and not is_noise(c)
            ),
            None,
        )
        if clause is not None and clause.type == "range_clause":
            self._exec_range(node, clause, body)
            return

        initializer = cond_node = update = None
        if clause is not None and clause.type == "for_clause":
            initializer = clause.child_by_field_name("initializer")
            cond_node = clause.child_by_field_name("condition")
            update = clause.child_by_field_name("update")
        elif clause is not None:
            cond_node = clause

        ctx = self._ctx
        loop_id = ctx.next_loop_id()
        if initializer is not None:
            self.execute(initializer)
        header = self._display(clause) if clause is not None else ""
        ctx.record(node, StatementKind.FOR_INIT, f"for {header}".rstrip())
        cond_text = (
            self._display(cond_node)
            if cond_node is not None
            else constants.CONDITION_CHECK_TEXT
        )

        while True:
            if ctx.loop_capped(loop_id):
                self._loop_cutoff(loop_id)
                break
            if cond_node is not None:
                cond = self._evaluator.evaluate(cond_node)
                if isinstance(cond, BoolValue) and not cond.value:
                    break
            if not self._run_iteration(node, loop_id, cond_text, body):
                break
            if update is not None:
                self.execute(update)

    def _exec_range(self, node, clause, body):
        ctx = self._ctx
        names = [
            self._text(n) for n in expression_list(clause.child_by_field_name("left"))
        ]
        collection = self._evaluator.evaluate(clause.child_by_field_name("right"))
        loop_id = ctx.next_loop_id()
        ctx.record(node, StatementKind.FOR_INIT, f"for {self._display(clause)}")
        range_text = f"range {self._display(clause.child_by_field_name('right'))}"

        for key, value in _range_pairs(collection):
            if ctx.loop_capped(loop_id):
                self._loop_cutoff(loop_id)
                break
            for name, bound in zip(names, (key, value)):
                if name != constants.DISCARD_NAME:
                    ctx.env.write(name, bound, type_label_of(bound))
            if not self._run_iteration(node, loop_id, range_text, body):
                break

    def _run_iteration(self, node, loop_id: str, text: str, body) -> bool:
        """Run one loop iteration; False when the loop must stop."""
        ctx = self._ctx
        iteration = ctx.loop_counters[loop_id] + 1
        ctx.loop_counters[loop_id] = iteration
        ctx.record(
            node,
            StatementKind.FOR_COND,
            text,
            loop=LoopIteration(loop_id=loop_id, iteration=iteration),
        )
        ctx.env.push_scope(loop_id)
        self.execute_block(body)
        ctx.env.pop_scope()
        if ctx.has_returned:
            return False
        signal, ctx.loop_signal = ctx.loop_signal, ""
        return signal != _BREAK

    def _loop_cutoff(self, loop_id: str):
        self._ctx.stats.loop_cutoffs += 1
        logger.debug(
            "Loop %s stopped after %d iterations",
            loop_id,
            self._ctx.config.max_loop_iterations,
        )

    def _exec_return(self, node):
        ctx = self._ctx
        result = _first_named(node)
        exprs = expression_list(result) if result is not None else []
        ctx.return_value = self._evaluator.evaluate(exprs[0]) if exprs else ABSENT
        ctx.has_returned = True
        ctx.record(node, StatementKind.FUNC_RETURN, self._display(node))

    def _exec_break(self, node):
        self._ctx.loop_signal = _BREAK
        self._ctx.record(node, StatementKind.BREAK, self._display(node))

    def _exec_continue(self, node):
        self._ctx.loop_signal = _CONTINUE
        self._ctx.record(node, StatementKind.CONTINUE, self._display(node))

    def _exec_labeled(self, node):
        inner = next(
            (c for c in node.named_children if c.type != "label_name" and not is_noise(c)),
            None,
        )
        if inner is not None:
            self.execute(inner)

    # ── expression statements ────────────────────────────────────

    def _exec_expression_statement(self, node):
        ctx = self._ctx
        expr = _first_named(node)
        if expr is not None and expr.type == "call_expression":
            func_node, arg_nodes = call_parts(expr)
            if func_node is not None and func_node.type == "identifier":
                decl = ctx.functions.lookup(self._text(func_node))
                if decl is not None:
                    self.invoke(decl, arg_nodes, expr)
                    return
            if func_node is not None and func_node.type == "selector_expression":
                package, member = selector_parts(func_node, ctx.source)
                if (
                    package == constants.FMT_PACKAGE
                    and member in constants.PRINT_FUNCTIONS
                ):
                    fragment = format_call(
                        member, self._evaluator.evaluate_all(arg_nodes)
                    )
                    ctx.write_output(fragment)
                    ctx.record(
                        node, StatementKind.CALL, self._display(node), output=fragment
                    )
                    return
        if expr is not None:
            self._evaluator.evaluate(expr)
        ctx.record(node, StatementKind.CALL, self._display(node))

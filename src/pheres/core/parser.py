# src/pheres/core/parser.py
"""
Recursive-descent parser for AgentSpeak programs.

Syntax:
  belief.                              fact (must be ground)
  head :- formula.                     rule
  !goal.                               initial goal
  [@label] +!goal : context <- body.   plan (also -!g, +?g, -?g, +b, -b)

Formulas combine literals and relations with & (and), | (or), not and
parentheses. Plan bodies are ';'-separated statements:
  !g  !!g  ?g  +b  -b  -+b  .internal(args)  action(args)  X = Y
  if (f) { ... } else { ... }   while (f) { ... }
"""

import logging

from pheres.core.errors import ParseError
from pheres.core.lexer import Token, TokenKind, significant, tokenize
from pheres.core.terms import (
    FALSE, NIL, TRUE, Atom, Number, String, Struct, Term, Var,
    format_term, is_expression, make_list, struct,
)
from pheres.core.syntax import (
    Achieve, Action, AddBelief, And, Constraint, Formula, If, Literal, Not, Or,
    Plan, Program, Relation, RemoveBelief, ReplaceBelief, Rule, Statement, Test,
    Trigger, TriggerKind, While, TRUE_FORMULA,
)

logger = logging.getLogger(__name__)

K = TokenKind

RELATIONS = {
    K.UNIFY: "=", K.EQUAL: "==", K.NOT_EQUAL: "\\==",
    K.LT: "<", K.LE: "<=", K.GT: ">", K.GE: ">=",
}
ADDITIVE = {K.PLUS: "+", K.MINUS: "-"}
MULTIPLICATIVE = {K.STAR: "*", K.SLASH: "/", K.DIV: "div", K.MOD: "mod"}
ARITHMETIC = set(ADDITIVE) | set(MULTIPLICATIVE) | {K.POW}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}


class AgentSpeakParser:
    def __init__(self, text: str):
        self.text = text
        self.lines = text.split("\n")
        self.tokens = significant(tokenize(text))
        self.pos = 0
        self._anonymous = 0

    # --- token helpers ---

    def peek(self, ahead: int = 0) -> Token:
        token = self.tokens[min(self.pos + ahead, len(self.tokens) - 1)]
        self._reject_malformed(token)
        return token

    def advance(self) -> Token:
        token = self.peek()
        if token.kind != K.EOF:
            self.pos += 1
        return token

    def check(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def accept(self, kind: TokenKind) -> Token | None:
        if self.check(kind):
            return self.advance()
        return None

    def expect(self, kind: TokenKind, what: str | None = None) -> Token:
        if self.check(kind):
            return self.advance()
        raise self.error(f"expected {what or repr(kind.value)}, found {describe(self.peek())}")

    def error(self, message: str, token: Token | None = None) -> ParseError:
        token = token or self.peek()
        source_line = self.lines[token.line - 1] if token.line <= len(self.lines) else ""
        return ParseError(message, token.line, token.column, source_line)

    def _reject_malformed(self, token: Token):
        if token.kind == K.BLOCK_COMMENT and not token.terminated:
            raise self.error("unterminated block comment", token)
        if token.kind == K.STRING and not token.terminated:
            raise self.error("unterminated string", token)
        if token.kind == K.UNKNOWN:
            raise self.error(f"unexpected character {token.text!r}", token)

    # --- program ---

    def parse(self, strict: bool = True) -> Program:
        program = Program()

        while self.tokens[self.pos].kind != K.EOF:
            start = self.pos
            try:
                self.parse_clause(program)
            except ParseError as e:
                if strict:
                    raise
                logger.warning("Skipping clause: %s", e.message)
                program.errors.append(e)
                self.recover(start)

        logger.debug(
            "Parsed %d beliefs, %d rules, %d goals, %d plans (%d errors)",
            len(program.beliefs), len(program.rules), len(program.goals),
            len(program.plans), len(program.errors),
        )
        return program

    def recover(self, start: int):
        """Skip to just past the next clause-ending period.

        Inside a plan body a period directly followed by a name opens an
        internal action instead of ending the clause.
        """
        in_body = any(t.kind == K.ARROW for t in self.tokens[start:self.pos])
        depth = 0
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1
            if token.kind == K.EOF:
                self.pos -= 1
                return
            if token.kind == K.ARROW:
                in_body = True
            elif token.kind in (K.OPEN_PAREN, K.OPEN_BRACKET, K.OPEN_BRACE):
                depth += 1
            elif token.kind in (K.CLOSE_PAREN, K.CLOSE_BRACKET, K.CLOSE_BRACE):
                depth = max(0, depth - 1)
            elif token.kind == K.DOT and depth == 0 and not (in_body and self._starts_internal_action(self.pos - 1)):
                return

    def _starts_internal_action(self, index: int) -> bool:
        nxt = self.tokens[index + 1] if index + 1 < len(self.tokens) else None
        return nxt is not None and nxt.kind == K.FUNCTOR and nxt.offset == self.tokens[index].end

    def parse_clause(self, program: Program):
        if self.accept(K.BANG):
            goal = self.parse_literal()
            self.expect(K.DOT, "'.' after initial goal")
            program.goals.append(goal)
        elif self.check(K.AT, K.PLUS, K.MINUS):
            program.plans.append(self.parse_plan())
        else:
            start = self.peek()
            head = self.parse_literal()
            if self.accept(K.DEFINE):
                body = self.parse_formula()
                self.expect(K.DOT, "'.' after rule")
                program.rules.append(Rule(head, body))
            else:
                if not head.is_ground:
                    raise self.error(f"fact {format_term(head)} has unbound variables", start)
                self.expect(K.DOT, "'.' after fact")
                program.beliefs.append(head)

    # --- plans ---

    def parse_plan(self) -> Plan:
        label = None
        if self.accept(K.AT):
            label = self.parse_literal()

        trigger = self.parse_trigger()

        context = TRUE_FORMULA
        if self.accept(K.COLON):
            context = self.parse_formula()

        body = ()
        if self.accept(K.ARROW):
            body = self.parse_body()

        self.expect(K.DOT, "'.' after plan")
        return Plan(trigger, context, body, label)

    def parse_trigger(self) -> Trigger:
        if self.accept(K.PLUS):
            operator = "+"
        elif self.accept(K.MINUS):
            operator = "-"
        else:
            raise self.error(f"expected '+' or '-' to start a triggering event, found {describe(self.peek())}")

        if self.accept(K.BANG):
            kind = TriggerKind.ACHIEVE
        elif self.accept(K.QUESTION):
            kind = TriggerKind.TEST
        else:
            kind = TriggerKind.BELIEF

        return Trigger(operator, kind, self.parse_literal())

    def parse_body(self) -> tuple[Statement, ...]:
        statements = []
        while True:
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            if self.accept(K.SEMI):
                if self.check(K.CLOSE_BRACE):
                    break
                continue
            # a closing brace already ends if/while, the ';' is optional there
            if isinstance(stmt, (If, While)) and not self.check(K.DOT, K.CLOSE_BRACE):
                continue
            break
        return tuple(statements)

    def parse_statement(self) -> Statement | None:
        if self.accept(K.BANG_BANG):
            return Achieve(self.parse_literal(), new_intention=True)
        if self.accept(K.BANG):
            return Achieve(self.parse_literal())
        if self.accept(K.QUESTION):
            return Test(self.parse_literal())
        if self.accept(K.PLUS):
            return AddBelief(self.parse_literal())
        if self.accept(K.MINUS_PLUS):
            return ReplaceBelief(self.parse_literal())
        if self.accept(K.MINUS):
            return RemoveBelief(self.parse_literal())
        if self.check(K.DOT):
            return self.parse_internal_action()
        if self.check(K.IF):
            return self.parse_if()
        if self.accept(K.WHILE):
            condition = self.parse_condition()
            return While(condition, self.parse_block())
        if self.check(K.TRUE) and self.peek(1).kind in (K.SEMI, K.DOT, K.CLOSE_BRACE):
            self.advance()
            return None

        start = self.peek()
        left = self.parse_expression()
        if self.peek().kind in RELATIONS:
            op = RELATIONS[self.advance().kind]
            return Constraint(Relation(op, left, self.parse_expression()))
        if isinstance(left, Atom) or (isinstance(left, Struct) and not is_expression(left)):
            name, args = _split_literal(left)
            return Action(name, args, internal=False)
        raise self.error(f"expected a plan body statement, found {format_term(left)}", start)

    def parse_internal_action(self) -> Action:
        dot = self.expect(K.DOT)
        name = self.peek()
        if name.kind != K.FUNCTOR or name.offset != dot.end:
            raise self.error(f"expected an internal action name right after '.', found {describe(name)}", name)
        literal = self.parse_literal()
        action_name, args = _split_literal(literal)
        return Action(action_name, args, internal=True)

    def parse_if(self) -> If:
        self.expect(K.IF)
        condition = self.parse_condition()
        then = self.parse_block()
        otherwise = ()
        if self.accept(K.ELSE):
            if self.check(K.IF):
                otherwise = (self.parse_if(),)
            else:
                otherwise = self.parse_block()
        return If(condition, then, otherwise)

    def parse_condition(self) -> Formula:
        self.expect(K.OPEN_PAREN, "'(' before condition")
        condition = self.parse_formula()
        self.expect(K.CLOSE_PAREN, "')' after condition")
        return condition

    def parse_block(self) -> tuple[Statement, ...]:
        self.expect(K.OPEN_BRACE, "'{'")
        if self.accept(K.CLOSE_BRACE):
            return ()
        body = self.parse_body()
        self.expect(K.CLOSE_BRACE, "'}' to close block")
        return body

    # --- formulas ---

    def parse_formula(self) -> Formula:
        left = self.parse_conjunction()
        while self.accept(K.OR):
            left = Or(left, self.parse_conjunction())
        return left

    def parse_conjunction(self) -> Formula:
        left = self.parse_negation()
        while self.accept(K.AND):
            left = And(left, self.parse_negation())
        return left

    def parse_negation(self) -> Formula:
        if self.accept(K.NOT):
            return Not(self.parse_negation())

        if self.check(K.OPEN_PAREN):
            # "(a & b)" groups formulas, "(X + 1) > 2" is arithmetic
            saved = self.pos
            try:
                self.advance()
                inner = self.parse_formula()
                self.expect(K.CLOSE_PAREN)
                if self.peek().kind not in RELATIONS and self.peek().kind not in ARITHMETIC:
                    return inner
            except ParseError:
                pass
            self.pos = saved

        start = self.peek()
        left = self.parse_expression()
        if self.peek().kind in RELATIONS:
            op = RELATIONS[self.advance().kind]
            return Relation(op, left, self.parse_expression())
        if isinstance(left, Atom) or (isinstance(left, Struct) and not is_expression(left)):
            return Literal(left)
        raise self.error(f"expected a literal or relation, found {format_term(left)}", start)

    # --- terms ---

    def parse_literal(self) -> Term:
        token = self.peek()
        if self.accept(K.TRUE):
            return TRUE
        if self.accept(K.FALSE):
            return FALSE
        if token.kind != K.FUNCTOR:
            raise self.error(f"expected a literal, found {describe(token)}")
        self.advance()

        if not self.accept(K.OPEN_PAREN):
            return Atom(token.text)
        args = []
        if not self.check(K.CLOSE_PAREN):
            args.append(self.parse_expression())
            while self.accept(K.COMMA):
                args.append(self.parse_expression())
        if not self.check(K.CLOSE_PAREN):
            raise self.error(
                f"expected ',' or ')' in arguments of {token.text}, found {describe(self.peek())}"
            )
        self.advance()
        return struct(token.text, *args)

    def parse_expression(self) -> Term:
        left = self.parse_product()
        while self.peek().kind in ADDITIVE:
            op = ADDITIVE[self.advance().kind]
            left = Struct(op, (left, self.parse_product()))
        return left

    def parse_product(self) -> Term:
        left = self.parse_power()
        while self.peek().kind in MULTIPLICATIVE:
            op = MULTIPLICATIVE[self.advance().kind]
            left = Struct(op, (left, self.parse_power()))
        return left

    def parse_power(self) -> Term:
        base = self.parse_unary()
        if self.accept(K.POW):
            return Struct("**", (base, self.parse_power()))
        return base

    def parse_unary(self) -> Term:
        if self.accept(K.MINUS):
            operand = self.parse_unary()
            if isinstance(operand, Number):
                return Number(-operand.value)
            return Struct("-", (operand,))
        return self.parse_primary()

    def parse_primary(self) -> Term:
        token = self.peek()

        if token.kind == K.NUMBER:
            self.advance()
            if any(c in token.text for c in ".eE"):
                return Number(float(token.text))
            return Number(int(token.text))
        if token.kind == K.STRING:
            self.advance()
            return String(_unescape(token.text[1:-1]))
        if token.kind == K.VARIABLE:
            self.advance()
            return Var(token.text)
        if token.kind == K.WILDCARD:
            self.advance()
            self._anonymous += 1
            return Var(f"_#{self._anonymous}")
        if token.kind in (K.FUNCTOR, K.TRUE, K.FALSE):
            return self.parse_literal()
        if self.accept(K.OPEN_PAREN):
            inner = self.parse_expression()
            self.expect(K.CLOSE_PAREN, "')'")
            return inner
        if self.accept(K.OPEN_BRACKET):
            return self.parse_list()

        raise self.error(f"expected a term, found {describe(token)}")

    def parse_list(self) -> Term:
        if self.accept(K.CLOSE_BRACKET):
            return NIL
        items = [self.parse_expression()]
        while self.accept(K.COMMA):
            items.append(self.parse_expression())
        tail = NIL
        if self.accept(K.OR):
            tail = self.parse_expression()
        self.expect(K.CLOSE_BRACKET, "']' to close list")
        return make_list(items, tail)

    def finish(self):
        self.accept(K.DOT)
        self.expect(K.EOF, "end of input")


def describe(token: Token) -> str:
    if token.kind == K.EOF:
        return "end of input"
    return repr(token.text)


def _split_literal(literal: Term) -> tuple[str, tuple[Term, ...]]:
    if isinstance(literal, Atom):
        return literal.name, ()
    return literal.functor, literal.args


def _unescape(text: str) -> str:
    out = []
    chars = iter(text)
    for c in chars:
        if c == "\\":
            nxt = next(chars, "")
            out.append(_ESCAPES.get(nxt, nxt))
        else:
            out.append(c)
    return "".join(out)


def parse_program(text: str, strict: bool = True) -> Program:
    """
    Parse a whole program.

    strict=True raises the first ParseError. strict=False records bad
    clauses in Program.errors and keeps loading the rest.
    """
    return AgentSpeakParser(text).parse(strict=strict)


def parse_term(text: str) -> Term:
    parser = AgentSpeakParser(text)
    term = parser.parse_expression()
    parser.finish()
    return term


def parse_formula(text: str) -> Formula:
    parser = AgentSpeakParser(text)
    formula = parser.parse_formula()
    parser.finish()
    return formula


def parse_trigger(text: str) -> Trigger:
    parser = AgentSpeakParser(text)
    trigger = parser.parse_trigger()
    parser.finish()
    return trigger

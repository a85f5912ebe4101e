"""Abstract syntax tree of untyped lambda calculus terms.

```
<term> ::= <variable>                       ; "Variable": identifier
         | <term> <term>+                   ; "Sequence": head applied to every following term, left to right
         | "\" <variable>* "." <term>+      ; "Lambda": multi-parameter abstraction, body is always a Sequence
```

Applications are kept flat: `f a b` is one Sequence of three nodes instead of `((f a) b)`, so a lambda with several
parameters can take all of its arguments in a single step.

Substitution (replace) is lexically scoped but not hygienic: a Lambda hides its parameters from the local map it is
given, but never renames anything, so a free variable of an inserted term can be captured by a binder of the same name.
Names from the global binding table are substituted everywhere, even under a binder of the same name. alpha_convert
provides an opt-in renaming pass for callers that want to avoid capture.
"""

from abc import abstractmethod, ABC


SUBS = ["₀", "₁", "₂", "₃", "₄", "₅", "₆", "₇", "₈", "₉"]


class LambdaTerm(ABC):
    """Superclass of every node of a term tree."""

    @property
    def _cls(self):
        return type(self).__name__

    @property
    @abstractmethod
    def nodes(self):
        """Child terms, in order."""

    @property
    @abstractmethod
    def tokenizable(self):
        """Whether or not this term needs parentheses when nested inside a Sequence."""

    @abstractmethod
    def copy(self):
        """Deep copy of this term. No node is shared between the copy and self."""

    @abstractmethod
    def replace(self, local, namespace):
        """Returns (new_term, modified): a new tree where every variable named in local (or else in namespace) is
        replaced by a copy of its term. local maps names to terms, namespace is any mapping of global bindings. Never
        mutates self.
        """

    @abstractmethod
    def free_variables(self, bound=frozenset()):
        """Set of names used freely in this term."""

    @abstractmethod
    def names(self):
        """Set of every name (free or bound) appearing in this term."""

    @abstractmethod
    def alpha_convert(self, avoid, renamed, taken):
        """Returns a copy of this term where every binder named in avoid is renamed to a fresh name. renamed maps the
        names of renamed binders in scope to their new names; taken holds every name that cannot be picked as fresh and
        grows as fresh names are handed out.
        """

    def display(self, indents=0):
        """Recursively displays the term tree with readable format.

        Format:
        <LambdaTerm>(expr='<expr>', nodes=[
            <LambdaTerm>(expr='<expr>', nodes=[
                ...
                <LambdaTerm>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}(expr='{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{self._cls}('{self}')"


class Variable(LambdaTerm):
    """Variable: a name, bound by an enclosing Lambda, by the binding table, or free."""

    def __init__(self, name):
        self.name = name

    @property
    def nodes(self):
        return []

    @property
    def tokenizable(self):
        return False

    def copy(self):
        return Variable(self.name)

    def replace(self, local, namespace):
        if self.name in local:
            return local[self.name].copy(), True
        elif self.name in namespace:
            return namespace[self.name].copy(), True
        return self.copy(), False

    def free_variables(self, bound=frozenset()):
        return set() if self.name in bound else {self.name}

    def names(self):
        return {self.name}

    def alpha_convert(self, avoid, renamed, taken):
        return Variable(renamed.get(self.name, self.name))

    @staticmethod
    def subscript(name, num):
        """Returns name with subscript of num."""
        return name + "".join(SUBS[int(digit)] for digit in str(num))

    @staticmethod
    def split(name):
        """Splits name into base name and subscript (-1 if there is none)."""
        subscript = ""
        while name and name[-1] in SUBS:
            subscript = str(SUBS.index(name[-1])) + subscript
            name = name[:-1]
        return name, int(subscript) if subscript else -1

    @staticmethod
    def fresh(name, taken):
        """Returns the next subscripted variant of name that isn't in taken, and adds it to taken."""
        base, __ = Variable.split(name)
        subscript = 0
        for other in taken:
            other_base, other_subscript = Variable.split(other)
            if other_base == base and other_subscript >= subscript:
                subscript = other_subscript + 1

        new_name = Variable.subscript(base, subscript)
        taken.add(new_name)
        return new_name

    def __eq__(self, other):
        return isinstance(other, Variable) and self.name == other.name

    def __str__(self):
        return self.name


class Sequence(LambdaTerm):
    """Application by juxtaposition: nodes[0] applied to nodes[1:]."""

    def __init__(self, nodes):
        assert nodes, "a Sequence cannot be empty"
        self._nodes = list(nodes)

    @property
    def nodes(self):
        return self._nodes

    @property
    def tokenizable(self):
        return True

    def copy(self):
        return Sequence([node.copy() for node in self._nodes])

    def replace(self, local, namespace):
        modified = False
        nodes = []
        for node in self._nodes:
            new_node, node_modified = node.replace(local, namespace)
            nodes.append(new_node)
            modified = modified or node_modified
        return Sequence(nodes), modified

    def free_variables(self, bound=frozenset()):
        return set().union(*(node.free_variables(bound) for node in self._nodes))

    def names(self):
        return set().union(*(node.names() for node in self._nodes))

    def alpha_convert(self, avoid, renamed, taken):
        return Sequence([node.alpha_convert(avoid, renamed, taken) for node in self._nodes])

    def __eq__(self, other):
        if not isinstance(other, Sequence) or len(self._nodes) != len(other.nodes):
            return False
        return all(node == other_node for node, other_node in zip(self._nodes, other.nodes))

    def __str__(self):
        return " ".join(f"({node})" if node.tokenizable else str(node) for node in self._nodes)


class Lambda(LambdaTerm):
    """Abstraction over one or more parameters. The body is always a Sequence, even around a single term."""

    def __init__(self, params, body):
        self.params = list(params)
        self.body = body if isinstance(body, Sequence) else Sequence([body])

    @property
    def nodes(self):
        return [self.body]

    @property
    def tokenizable(self):
        return True

    def copy(self):
        return Lambda(self.params, self.body.copy())

    def replace(self, local, namespace):
        # parameters shadow the local map only; global bindings are looked up regardless
        dropped = {name: term for name, term in local.items() if name not in self.params}
        body, modified = self.body.replace(dropped, namespace)
        return Lambda(self.params, body), modified

    def free_variables(self, bound=frozenset()):
        return self.body.free_variables(bound | set(self.params))

    def names(self):
        return set(self.params) | self.body.names()

    def alpha_convert(self, avoid, renamed, taken):
        inner = dict(renamed)
        params = []
        for param in self.params:
            if param in avoid:
                inner[param] = Variable.fresh(param, taken)
            else:
                inner.pop(param, None)
            params.append(inner.get(param, param))
        return Lambda(params, self.body.alpha_convert(avoid, inner, taken))

    def __eq__(self, other):
        return isinstance(other, Lambda) and self.params == other.params and self.body == other.body

    def __str__(self):
        return f"\\{' '.join(self.params)}. {self.body}"


def alpha_convert(term, avoid, taken=None):
    """Returns a copy of term where every binder whose name is in avoid has been renamed to a fresh subscripted name
    (x -> x₀, x₁, ...). Fresh names never collide with avoid or with any name already in term.
    """
    if taken is None:
        taken = set()
    taken |= set(avoid) | term.names()
    return term.alpha_convert(set(avoid), {}, taken)

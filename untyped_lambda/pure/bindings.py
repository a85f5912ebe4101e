"""Binding table: names bound by `name = term` statements."""


class BindingTable:
    """Maps names to the terms they were bound to. Every term is copied on the way in, so no node of a bound term is
    shared with the statement that defined it. Rebinding a name replaces the visible entry.
    """

    def __init__(self):
        self._bindings = {}

    def bind(self, name, term):
        """Binds a copy of term to name."""
        self._bindings[name] = term.copy()

    def clear(self):
        self._bindings.clear()

    def __contains__(self, name):
        return name in self._bindings

    def __getitem__(self, name):
        return self._bindings[name]

    def __iter__(self):
        return iter(self._bindings)

    def __len__(self):
        return len(self._bindings)

    def items(self):
        return self._bindings.items()

    def __repr__(self):
        return f"BindingTable({', '.join(self._bindings)})"

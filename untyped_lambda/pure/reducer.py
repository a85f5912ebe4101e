"""Leftmost-outermost reduction of term trees.

For a Sequence whose head is a Lambda with k parameters and m arguments:
    - m >= k: the first k arguments are substituted into the body, which takes the place of the head and those
              arguments; any extra arguments stay queued and the loop goes on with the new head.
    - m < k:  partial application. The m arguments are substituted and the Sequence collapses into a Lambda over the
              k - m remaining parameters.
A head that is itself a Sequence is reduced first. A head that is a Variable can never be applied, so only the
arguments are reduced, each one independently. Lambda bodies are reduced too, so the result is a normal form.

There is no step limit: a term without normal form keeps the reducer busy forever unless it runs in step mode, where
beta_reduce returns right after the first rewrite and can be called again to resume from the root.
"""

from untyped_lambda.pure.term import Lambda, Sequence, alpha_convert


class NormalOrderReducer:
    """Owns a term tree and reduces it in place. namespace holds the global bindings consulted by substitution."""

    def __init__(self, tree, namespace, hygienic=False):
        self.tree = tree
        self.namespace = namespace
        self.hygienic = hygienic

        self.steps = 0          # rewrites done so far, over every call
        self.paused = False     # set by the first rewrite of a step-mode call
        self._step = False
        self._modified = False

    def beta_reduce(self, step=False):
        """Reduces self.tree. If step, stops after a single rewrite. Returns whether any rewrite happened, so a step-mode
        call returning False means self.tree is in normal form.
        """
        self._step = step
        self._modified = False
        self.paused = False

        self.tree = self._reduce(self.tree)
        return self._modified

    def _rewrote(self):
        self.steps += 1
        self._modified = True
        if self._step:
            self.paused = True

    def _reduce(self, term):
        """Returns the reduced term. Sequences are mutated in place, but the returned node may be a different one."""
        while isinstance(term, Sequence):
            if len(term.nodes) == 1:
                term = term.nodes[0]
                continue

            head = term.nodes[0]
            if isinstance(head, Lambda):
                term = self._apply(term)
                if self.paused:
                    return term
                continue

            if isinstance(head, Sequence):
                term.nodes[0] = self._reduce(head)
                if self.paused:
                    return term
                if isinstance(term.nodes[0], Lambda):
                    continue

            # stuck at the head: only the arguments can be reduced
            for idx in range(1, len(term.nodes)):
                term.nodes[idx] = self._reduce(term.nodes[idx])
                if self.paused:
                    return term
            return term

        if isinstance(term, Lambda):
            self._reduce_body(term)
        return term

    def _reduce_body(self, lam):
        body = self._reduce(lam.body)
        lam.body = body if isinstance(body, Sequence) else Sequence([body])

    def _apply(self, seq):
        """Applies the Lambda at the head of seq to as many arguments as it takes. Returns the node replacing seq."""
        lam, *args = seq.nodes
        arity = len(lam.params)

        if len(args) >= arity:
            taken = args[:arity]
            params, body = lam.params, lam.body
            if self.hygienic:
                body = alpha_convert(body, self._free_variables(taken))

            local = dict(zip(params, taken))  # a repeated parameter binds the later argument
            body, __ = body.replace(local, self.namespace)
            result = body.nodes[0] if len(body.nodes) == 1 else body

            seq.nodes[:arity + 1] = [result]
            self._rewrote()
            return seq.nodes[0] if len(seq.nodes) == 1 else seq

        remaining = Lambda(lam.params[len(args):], lam.body)
        if self.hygienic:
            remaining = alpha_convert(remaining, self._free_variables(args))

        local = dict(zip(lam.params, args))
        body, __ = remaining.body.replace(local, self.namespace)
        self._rewrote()
        return Lambda(remaining.params, body)

    @staticmethod
    def _free_variables(terms):
        return set().union(*(term.free_variables() for term in terms))

    def __repr__(self):
        return repr(self.tree)

    def __str__(self):
        return str(self.tree)

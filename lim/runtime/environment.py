"""Variable scopes. An Environment maps names to values and may be enclosed by an outer Environment.

Lookups walk outward until the name is found; assignments only ever write to the innermost mapping. A program runs in
one global Environment, and every function call gets a fresh Environment enclosed by the function's *defining*
environment, which is what makes closures lexical.
"""


class Environment:
    """Chained name -> LimObject mapping."""

    def __init__(self, outer=None):
        self.store = {}
        self.outer = outer

    def get(self, name):
        """Returns the value bound to name in this or an enclosing environment, or None if it is unbound."""
        env = self
        while env is not None:
            if name in env.store:
                return env.store[name]
            env = env.outer
        return None

    def set(self, name, value):
        """Binds name in this environment (never in an enclosing one) and returns value."""
        self.store[name] = value
        return value

    def enclosed(self):
        """Returns a new, empty environment enclosed by this one."""
        return Environment(self)

    def __repr__(self):
        return f"Environment({sorted(self.store)}, outer={self.outer!r})"

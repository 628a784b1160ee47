from .models import Environment


def resolve_variables(text: str, env: Environment | None) -> str:
    """Replace ``{{key}}`` tokens with values from the active environment.

    Substitution walks the variables in declared order and rewrites the
    running result each time, so a later variable can rewrite text that an
    earlier substitution produced. Disabled variables and blank keys are
    skipped; unknown tokens stay in place.
    """
    if env is None:
        return text
    result = text
    for variable in env.variables:
        if variable.enabled and variable.key:
            result = result.replace("{{" + variable.key + "}}", variable.value)
    return result

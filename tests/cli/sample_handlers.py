"""Handlers referenced by module:function in the command-line tests."""


def echo(t, d):
    return d.input


def upper(t, d):
    return d.input.upper()


not_callable = "echo"


def logging_echo(t, d):
    t.log(f"saw {d.input}")
    return d.input

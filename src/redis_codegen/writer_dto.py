"""Data transfer objects used while generating command builders."""

from __future__ import annotations

from dataclasses import dataclass, field

from redis_codegen.commands import CommandArgument, CommandDefinition
from redis_codegen.helper import TypeHintedVariable


@dataclass
class ParameterInfo:
    """A parameter of a command builder, mapped from a top-level command argument.

    Attributes:
        name: The parameter name, unique within its builder.
        type_hint: The type of a single value, e.g. 'int' or 'arg_types.set.Condition'.
        argument: The command argument this parameter stands for.
        token: The token the builder writes before the value. None if there is none, or if the type of the
            parameter writes it itself.
    """

    name: str
    type_hint: str
    argument: CommandArgument
    token: str | None = None

    @property
    def optional(self) -> bool:
        return self.argument.optional

    @property
    def multiple(self) -> bool:
        return self.argument.multiple

    @property
    def full_type_hint(self) -> str:
        """The parameter type, e.g. 'Sequence[RedisArg] | None' for an optional argument taking multiple values."""
        type_hint = f"Sequence[{self.type_hint}]" if self.multiple else self.type_hint
        if self.optional:
            return f"{type_hint} | None"
        return type_hint

    def to_parameter(self) -> TypeHintedVariable:
        """Convert to a parameter of the builder signature. Optional parameters default to None."""
        return TypeHintedVariable(self.name, self.full_type_hint, "None" if self.optional else "")


@dataclass
class CommandInfo:
    """Everything needed to write the builder of one command.

    Attributes:
        command_name: The command name as sent, e.g. 'CLIENT KILL'.
        method_name: The name of the builder method, e.g. 'client_kill'.
        definition: The command definition.
        parameters: The builder parameters, in argument order.
        docs: The docstring lines of the builder.
    """

    command_name: str
    method_name: str
    definition: CommandDefinition
    parameters: list[ParameterInfo] = field(default_factory=list)
    docs: list[str] = field(default_factory=list)

    @property
    def name_parts(self) -> list[str]:
        """The words of the command name, each sent as its own argument."""
        return self.command_name.split()

    def signature_parameters(self) -> list[TypeHintedVariable | str]:
        """The builder parameters in signature order.

        Parameters are positional up to the first optional one. From there on they are keyword-only,
        so later required arguments stay required without a default.

        Returns:
            list[TypeHintedVariable | str]: The parameters, with a '*' separator where keyword-only ones start.
        """
        out: list[TypeHintedVariable | str] = []
        keyword_only = False

        for parameter in self.parameters:
            if parameter.optional and not keyword_only:
                out.append("*")
                keyword_only = True
            out.append(parameter.to_parameter())

        return out

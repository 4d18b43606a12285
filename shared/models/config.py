from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Declares one environment setting a client needs before it can boot.

    Attributes:
        env_key (str): Raw key name; the client prefixes it with its type and engine (e.g. "BASE_URL" -> "RAG_RAGFLOW_BASE_URL").
        val_type (str): Expected value type. One of "string", "number", "bool" and "list".
        default (str | int | float | bool | list | None): Fallback used when the variable is unset. None marks the setting as required.
    """

    env_key: str
    val_type: str = "string"
    default: str | int | float | bool | list | None = None

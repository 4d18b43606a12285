from shared.helper.HelperConfig import HelperConfig
from shared.clients.rag.RAGClientInterface import RAGClientInterface

class RAGClientManager:
    """
    Manager class that instantiates the RAG client of the configured engine.

    Exactly one remote service instance is used per configuration.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the RAG engine name from ENV configuration.

        Returns:
            str: The engine name, capitalized for class lookup (e.g. "Ragflow").

        Raises:
            ValueError: If the configured engine name is empty.
        """
        engine = self.helper_config.get_string_val("RAG_ENGINE", default="ragflow").strip().lower()
        if not engine:
            raise ValueError("No RAG engine specified in configuration.")
        return engine.capitalize()

    def _initialize_client(self) -> RAGClientInterface:
        """
        Initializes the RAG client of the configured engine.

        Returns:
            RAGClientInterface: The client instance.

        Raises:
            ValueError: If the engine is not supported.
        """
        engine = self._get_engine_from_env()
        className = f"RAGClient{engine}"
        # try to import the class from shared.clients.rag.{engine}
        try:
            module = __import__(
                f"shared.clients.rag.{engine.lower()}.{className}",
                fromlist=[className],
            )
            client_class = getattr(module, className)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported RAG engine specified: '{engine}'. Error: {e}")
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated RAG client for engine: %s", engine)
        return client

    def get_client(self) -> RAGClientInterface:
        """
        Returns the instantiated RAG client.

        Returns:
            RAGClientInterface: The RAG client instance.
        """
        return self.client

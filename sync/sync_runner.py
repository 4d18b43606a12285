"""Sync runner entry point.

Mirrors the documents, parse status and chunks of the configured RAGFlow
datasets into a local store. Datasets are selected by remote id via
SYNC_DATASET_IDS, e.g. SYNC_DATASET_IDS=[ds_1,ds_2].

Usage:
    python -m sync.sync_runner
"""

from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.document import Dataset
from shared.repositories.memory.RepositoryMemory import (
    ChunkRepositoryMemory,
    DatasetRepositoryMemory,
    DocumentRepositoryMemory,
)
from services.document_sync.SyncOrchestrator import SyncOrchestrator


def main() -> None:
    """Run one full mirror pass over all configured datasets."""
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    dataset_ids = config.get_dataset_ids()
    if not dataset_ids:
        logger.warning("SYNC_DATASET_IDS is empty, nothing to sync.")
        return

    rag_client = RAGClientManager(helper_config=config).get_client()
    datasets = DatasetRepositoryMemory()
    documents = DocumentRepositoryMemory()
    chunks = ChunkRepositoryMemory()
    orchestrator = SyncOrchestrator(
        helper_config=config,
        rag_client=rag_client,
        dataset_repository=datasets,
        document_repository=documents,
        chunk_repository=chunks,
    )

    try:
        # the remote service is required, without it there is nothing to mirror
        try:
            rag_client.boot()
            rag_client.do_healthcheck()
        except Exception as e:
            logger.error(f"Error booting RAG client {rag_client.get_engine_name()}: {e}. Aborting.")
            return

        for remote_id in dataset_ids:
            dataset = datasets.find_by_remote_id(remote_id) or datasets.save(Dataset(remote_id=remote_id, name=remote_id))
            logger.info("Mirroring dataset %s", remote_id, color="blue")

            # the listing already carries progress, so no separate status poll is needed
            ingested = orchestrator.sync_dataset_documents(dataset)
            synced = orchestrator.sync_all_chunks(dataset)

            for error in ingested.errors + synced.errors:
                logger.warning(error)
            logger.info(
                "Dataset %s: %d documents, %d with chunks, %d errors",
                remote_id,
                ingested.synced_count,
                synced.synced_count,
                len(ingested.errors) + len(synced.errors),
                color="green",
            )
            stats = orchestrator.get_dataset_stats(dataset)
            logger.info("Dataset %s status: %s", remote_id, ", ".join(f"{label}: {count}" for label, count in stats.by_label().items() if count))
    finally:
        rag_client.close()


if __name__ == "__main__":
    main()

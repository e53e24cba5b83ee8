"""
api/services.py
Process-wide service graph shared by all routers.

Built once per application; tests build their own with injected
collaborators (a fake chat model, a seeded random source, a knowledge
store with a deterministic embedder).
"""
import random
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from calculation_engine.dispatcher import DispatchOrchestrator
from calculation_engine.distance import DistanceEngine
from calculation_engine.weather import WeatherService
from generation.fallback import GenerativeFallback
from generation.providers import ProviderRegistry
from generation.summarizer import DocumentSummarizer
from ingestion.pipeline import DocumentPipeline
from knowledge_base.conversation_store import ConversationStore
from knowledge_base.document_store import DocumentStore
from knowledge_base.knowledge_store import KnowledgeStore
from query_processor.classifier import QueryClassifier


@dataclass
class Services:
    registry:      ProviderRegistry
    classifier:    QueryClassifier
    fallback:      GenerativeFallback
    dispatcher:    DispatchOrchestrator
    distance:      DistanceEngine
    weather:       WeatherService
    knowledge:     KnowledgeStore
    conversations: ConversationStore
    documents:     DocumentStore
    pipeline:      DocumentPipeline

    @classmethod
    def build(
        cls,
        registry: Optional[ProviderRegistry] = None,
        rng: Optional[random.Random] = None,
        knowledge: Optional[KnowledgeStore] = None,
    ) -> "Services":
        registry  = registry if registry is not None else ProviderRegistry.from_settings()
        knowledge = knowledge if knowledge is not None else KnowledgeStore()
        documents = DocumentStore()
        distance  = DistanceEngine()
        weather   = WeatherService(rng=rng)
        fallback  = GenerativeFallback(registry)
        return cls(
            registry      =registry,
            classifier    =QueryClassifier(registry),
            fallback      =fallback,
            dispatcher    =DispatchOrchestrator(
                fallback,
                knowledge_store=knowledge,
                distance_engine=distance,
                weather_service=weather,
            ),
            distance      =distance,
            weather       =weather,
            knowledge     =knowledge,
            conversations =ConversationStore(),
            documents     =documents,
            pipeline      =DocumentPipeline(
                knowledge,
                summarizer=DocumentSummarizer(registry),
                document_store=documents,
            ),
        )


def get_services(request: Request) -> Services:
    return request.app.state.services

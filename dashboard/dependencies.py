#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Heatmap Tracker - Dashboard Dependencies
FastAPI dependency providers

The store and services live on ``app.state`` and are created by the
application lifespan; there is no module-level singleton.

Version: 1.0.0
"""

import logging
from datetime import date

from fastapi import Depends, HTTPException, Request, status

from core.storage import TopicStore
from dashboard.config import DashboardSettings
from services import ServiceManager, TopicService

logger = logging.getLogger(__name__)

# ===== DEPENDENCY PROVIDERS =====

def get_app_settings(request: Request) -> DashboardSettings:
    return request.app.state.settings


def get_services(request: Request) -> ServiceManager:
    services = getattr(request.app.state, "services", None)
    if services is None or not services.initialized:
        logger.error("Services requested before initialization")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up"
        )
    return services


def get_store(services: ServiceManager = Depends(get_services)) -> TopicStore:
    return services.store


def get_topic_service(services: ServiceManager = Depends(get_services)) -> TopicService:
    return services.topic_service


def get_today(services: ServiceManager = Depends(get_services)) -> date:
    return services.clock()

# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain layer for synthetic allocation and usage classification.

This package contains pure business logic with zero external dependencies.
All domain code uses only Python stdlib (dataclasses, enum, threading) and
internal heap_tester.domain imports.

Modules:
    entities: Domain entities (MemoryBlock)
    value_objects: Immutable value objects (UsageSample, Tier, HarnessStatus)
    services: Domain services (AllocationPool, classify_usage)
    errors: Domain exception hierarchy
"""

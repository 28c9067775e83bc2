"""
AI repair suggestion for a reported problem
"""
import logging
from typing import Optional

from techmate.core.errors import ValidationError
from techmate.core.logging import truncate
from techmate.services.ai_client import AIClient, get_ai_client

logger = logging.getLogger(__name__)

NOT_SPECIFIED = "Não especificada"

SOLUTION_SECTIONS = [
    "Diagnóstico",
    "Causa Provável",
    "Solução Recomendada",
    "Prevenção",
    "Peças Necessárias",
]

SYSTEM_PROMPT = """Você é um especialista em manutenção industrial com vasta experiência em diagnóstico e resolução de problemas de máquinas.

A sua tarefa é analisar problemas reportados por técnicos e fornecer soluções práticas e detalhadas.

Estruture sempre a sua resposta da seguinte forma:
1. **Diagnóstico**: Análise breve do problema
2. **Causa Provável**: O que pode estar a causar o problema
3. **Solução Recomendada**: Passos detalhados para resolver
4. **Prevenção**: Como evitar que o problema volte a ocorrer
5. **Peças Necessárias**: Lista de peças que podem ser necessárias (se aplicável)

Seja conciso mas completo. Use linguagem técnica apropriada."""


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(
    problem_description: str,
    machine_name: Optional[str] = None,
    machine_location: Optional[str] = None
) -> str:
    return (
        f"Máquina: {machine_name or NOT_SPECIFIED}\n"
        f"Localização: {machine_location or NOT_SPECIFIED}\n"
        f"\n"
        f"Problema Reportado:\n"
        f"{problem_description}\n"
        f"\n"
        f"Por favor, forneça uma solução detalhada para este problema."
    )


async def generate_solution(
    problem_description: str,
    machine_name: Optional[str] = None,
    machine_location: Optional[str] = None,
    client: Optional[AIClient] = None
) -> str:
    """
    Ask the AI gateway for a five-part repair suggestion

    Gateway errors (rate limit, payment, credentials, generic) propagate
    unchanged so callers can tell them apart.
    """
    if not problem_description or not problem_description.strip():
        raise ValidationError(["problem_description"], "Problem description is required")

    logger.info("Generating solution for problem: %s", truncate(problem_description))

    client = client or get_ai_client()
    solution = await client.chat_completion([
        {"role": "system", "content": build_system_prompt()},
        {"role": "user", "content": build_user_prompt(problem_description, machine_name, machine_location)},
    ])

    logger.info("Solution generated successfully")
    return solution

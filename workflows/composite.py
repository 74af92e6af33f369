"""
LangGraph-based composite workflow: CNN classification -> prompt -> LLM analysis.

Graph:
  validate_node ─┬─(invalid)──────────────────────────────────────────────► END
                 ├─(use_cnn)──► classify_node ─┬─(failed)────────────────► END
                 │                             └─(ok)──┐
                 └─(skip cnn)──────────────────────────┴► compose_prompt_node
                                                          └► analyze_node ► END

Rules:
- The CNN call always completes before the LLM call
- A failed stage is terminal for the run; nothing is retried across stages
- Every exit carries an explicit outcome
- run() never raises for workflow failures
"""

import logging
from typing import Any, Dict, Optional

from langgraph.graph import END, StateGraph

from inference import (
    ClassificationResult,
    DEFAULT_MODEL,
    ImageAnalysisBackend,
    ImageClassifier,
)
from inference.prompts import DEFAULT_ALT_TEXT_PROMPT, compose_prompt
from workflows.state import CompositeResult, CompositeState

INTERNAL_ERROR_MESSAGE = "An unexpected internal server error occurred during the CNN-LLM workflow."


class CompositeWorkflow:
    """
    Sequences a CNN prediction and an LLM image analysis into one operation.

    Usage:
        workflow = CompositeWorkflow(classifier=cnn_client, analyzer=openrouter_client)
        result = await workflow.run(image_bytes, "jet.jpg", model="openai/gpt-4o")
        if result.ok:
            print(result.response, result.label, result.confidence)
    """

    def __init__(
        self,
        classifier: Optional[ImageClassifier],
        analyzer: ImageAnalysisBackend,
        base_prompt: str = DEFAULT_ALT_TEXT_PROMPT,
        logger: Optional[logging.Logger] = None,
    ):
        self.classifier = classifier
        self.analyzer = analyzer
        self.base_prompt = base_prompt
        self.logger = logger or logging.getLogger(__name__)
        self.graph = self._build_graph()

    def _build_graph(self):
        graph = StateGraph(CompositeState)

        graph.add_node("validate_node", self._validate_node)
        graph.add_node("classify_node", self._classify_node)
        graph.add_node("compose_prompt_node", self._compose_prompt_node)
        graph.add_node("analyze_node", self._analyze_node)

        graph.set_entry_point("validate_node")

        graph.add_conditional_edges(
            "validate_node",
            self._route_from_validate,
            {
                "classify": "classify_node",
                "compose": "compose_prompt_node",
                "stop": END,
            },
        )
        graph.add_conditional_edges(
            "classify_node",
            self._route_from_classify,
            {
                "success": "compose_prompt_node",
                "failure": END,
            },
        )
        graph.add_edge("compose_prompt_node", "analyze_node")
        graph.set_finish_point("analyze_node")

        return graph.compile()

    # ─────────────────────────────────────────────────────
    # ROUTING
    # ─────────────────────────────────────────────────────

    def _route_from_validate(self, state: CompositeState) -> str:
        if state.outcome is not None:
            return "stop"
        return "classify" if state.use_cnn else "compose"

    def _route_from_classify(self, state: CompositeState) -> str:
        return "failure" if state.outcome is not None else "success"

    # ─────────────────────────────────────────────────────
    # NODE IMPLEMENTATIONS
    # ─────────────────────────────────────────────────────

    async def _validate_node(self, state: CompositeState) -> Dict[str, Any]:
        """Reject missing input before any network call."""
        if not state.image_bytes:
            self.logger.warning("Composite workflow called without image data")
            return {
                "outcome": "invalid_argument",
                "message": "An image file is required.",
            }
        if state.use_cnn and self.classifier is None:
            self.logger.error("CNN stage requested but no classifier is configured")
            return {
                "outcome": "classification_failed",
                "message": "CNN prediction failed: CNN service is not configured.",
            }
        return {"outcome": None}

    async def _classify_node(self, state: CompositeState) -> Dict[str, Any]:
        """
        Call the CNN.

        A failure result or an exception from the classifier ends the run.
        """
        try:
            classification = await self.classifier.predict(state.image_bytes, state.filename)
        except Exception as e:
            self.logger.error(f"CNN classifier raised: {e}", exc_info=True)
            classification = ClassificationResult.failure(str(e) or type(e).__name__)

        if classification is None or not classification.success:
            detail = (
                classification.detail
                if classification is not None and classification.detail
                else "CNN prediction service returned no result or indicated failure."
            )
            self.logger.error(f"CNN prediction failed. Details: {detail}")
            return {
                "classification": classification,
                "outcome": "classification_failed",
                "message": f"CNN prediction failed: {detail}",
            }

        if not classification.label:
            self.logger.warning("CNN reported success without a predicted label")
        else:
            self.logger.info(
                f"CNN prediction received: {classification.label} ({classification.confidence})"
            )
        return {"classification": classification}

    async def _compose_prompt_node(self, state: CompositeState) -> Dict[str, Any]:
        return {"prompt": compose_prompt(self.base_prompt, state.user_prompt)}

    async def _analyze_node(self, state: CompositeState) -> Dict[str, Any]:
        """Call the LLM with the image, prompt, and CNN hints."""
        classification = state.classification
        result = await self.analyzer.analyze_image(
            state.model,
            state.image_bytes,
            state.prompt,
            temperature=state.temperature,
            predicted_label=classification.label if classification else None,
            confidence=classification.confidence if classification else None,
        )

        if not result.ok:
            self.logger.error(f"LLM analysis failed: {result.detail}")
            return {
                "analysis": result,
                "outcome": "analysis_failed",
                "message": f"LLM analysis failed: {result.detail}",
            }

        self.logger.info("Successfully received LLM response")
        return {"analysis": result, "outcome": "completed"}

    # ─────────────────────────────────────────────────────
    # PUBLIC INTERFACE
    # ─────────────────────────────────────────────────────

    async def run(
        self,
        image_bytes: Optional[bytes],
        filename: str = "image.jpg",
        model: str = "",
        user_prompt: Optional[str] = None,
        temperature: float = 1.0,
        use_cnn: bool = True,
    ) -> CompositeResult:
        """
        Execute one composite run.

        Args:
            image_bytes: Raw image data (required)
            filename: Original filename, forwarded to the CNN
            model: LLM model identifier
            user_prompt: Optional caller text appended to the base prompt
            temperature: Sampling temperature [0.0, 2.0]
            use_cnn: False skips classification entirely

        Returns:
            CompositeResult with an explicit outcome
        """
        try:
            initial_state = CompositeState(
                image_bytes=image_bytes,
                filename=filename or "image.jpg",
                model=model or DEFAULT_MODEL.value,
                user_prompt=user_prompt,
                temperature=temperature,
                use_cnn=use_cnn,
            )
        except ValueError as e:
            return CompositeResult(outcome="invalid_argument", detail=str(e))

        try:
            final = await self.graph.ainvoke(initial_state)
        except Exception as e:
            self.logger.error(f"Fatal error during CNN-LLM workflow: {e}", exc_info=True)
            return CompositeResult(outcome="internal_error", detail=INTERNAL_ERROR_MESSAGE)

        return self._to_result(final)

    def _to_result(self, final: Any) -> CompositeResult:
        if isinstance(final, CompositeState):
            final = vars(final)

        outcome = final.get("outcome") or "internal_error"
        if outcome != "completed":
            return CompositeResult(
                outcome=outcome,
                detail=final.get("message") or INTERNAL_ERROR_MESSAGE,
            )

        classification = final.get("classification")
        analysis = final.get("analysis")
        return CompositeResult(
            outcome="completed",
            response=(analysis.output or "") if analysis else "",
            label=classification.label if classification else None,
            confidence=classification.confidence if classification else None,
        )

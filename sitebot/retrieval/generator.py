"""
Answer generation with a local causal language model.
"""

from transformers import AutoTokenizer, AutoModelForCausalLM
import torch
from typing import Dict, List

from ..config.settings import Config
from ..errors import GenerationError
from ..utils.logging import get_logger


def build_messages(system_prompt: str, context_text: str, user_query: str) -> List[Dict[str, str]]:
    """Chat messages for one grounded answer; context may be empty."""
    return [
        {'role': 'system', 'content': system_prompt},
        {'role': 'user', 'content': f"Context:\n{context_text}\n\nQuestion: {user_query}"},
    ]


class ResponseGenerator:
    """Generates support answers from retrieved context using a chat LLM."""

    def __init__(self, config: Config):
        """Initialize response generator with configuration."""
        self.config = config
        self.logger = get_logger(__name__)
        self.model_path = config.generator_model
        self.device = self._get_device()

        self.logger.info(f"Loading generator model: {self.model_path}")
        self.logger.info(f"Device: {self.device}")

        self.tokenizer = AutoTokenizer.from_pretrained(self.model_path, trust_remote_code=True)
        self.model = AutoModelForCausalLM.from_pretrained(
            self.model_path,
            torch_dtype=torch.float16 if self.device != 'cpu' else torch.float32,
            device_map=self.device if self.device != 'cpu' else None,
            trust_remote_code=True
        )

        if self.tokenizer.pad_token is None:
            self.tokenizer.pad_token = self.tokenizer.eos_token

        self.logger.info("Generator model loaded successfully!")

    def _get_device(self) -> str:
        """Determine the best device to use."""
        if self.config.use_gpu and torch.cuda.is_available():
            return 'cuda'
        return 'cpu'

    def complete(self, system_prompt: str, context_text: str, user_query: str) -> str:
        """Generate an answer to ``user_query`` grounded in ``context_text``."""
        messages = build_messages(system_prompt, context_text, user_query)

        try:
            prompt = self.tokenizer.apply_chat_template(
                messages, tokenize=False, add_generation_prompt=True)
            inputs = self.tokenizer(prompt, return_tensors="pt")

            if self.device != 'cpu':
                inputs = {k: v.to(self.device) for k, v in inputs.items()}

            with torch.no_grad():
                outputs = self.model.generate(
                    **inputs,
                    max_new_tokens=self.config.generation_max_tokens,
                    temperature=self.config.generation_temperature,
                    do_sample=True,
                    top_p=0.9,
                    pad_token_id=self.tokenizer.pad_token_id,
                    eos_token_id=self.tokenizer.eos_token_id
                )
        except Exception as e:
            raise GenerationError(f"Generation failed: {e}") from e

        # Only decode the newly generated tokens
        prompt_length = inputs['input_ids'].shape[1]
        return self.tokenizer.decode(outputs[0][prompt_length:], skip_special_tokens=True).strip()

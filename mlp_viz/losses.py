"""
Loss Catalogue

Fixed registry of classification losses. Each descriptor renders its loss,
its gradient with respect to the output logits and its explanatory text from
the number of classes K and the current hyperparameter values. Formulas are
LaTeX; prose is markdown with inline ``$...$`` math.

``LossSelection`` holds the active loss and hyperparameter values for a
session and enforces the K == 2 requirement of binary-only losses.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from mlp_viz.errors import InvalidOperation, OutOfRange

logger = logging.getLogger(__name__)

Params = Mapping[str, float]


def fmt(value: float) -> str:
    """Shortest decimal form of a number: 2.0 -> '2', 0.1 -> '0.1'."""
    return f"{value:g}"


@dataclass(frozen=True)
class LossParameter:
    key: str
    label: str
    minimum: float
    maximum: float
    step: float
    default: float

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum

    def clamp(self, value: float) -> float:
        return max(self.minimum, min(self.maximum, value))


@dataclass(frozen=True)
class DerivationSection:
    heading: str
    body_fn: Callable[[int, Params], str]

    def body(self, num_classes: int, params: Params) -> str:
        return self.body_fn(num_classes, params)


@dataclass(frozen=True)
class LossDescriptor:
    id: str
    label: str
    tag: str
    best_for: str
    color: str
    requires_binary_output: bool
    formula_fn: Callable[[int, Params], str]
    gradient_fn: Callable[[int, Params], str]
    explanation_fn: Callable[[int, Params], str]
    gradient_note_fn: Callable[[int, Params], str]
    parameters: Tuple[LossParameter, ...] = ()
    derivation_sections: Tuple[DerivationSection, ...] = ()

    def parameter(self, key: str) -> LossParameter:
        for p in self.parameters:
            if p.key == key:
                return p
        raise InvalidOperation(f"{self.label} has no parameter {key!r}")

    def defaults(self) -> Dict[str, float]:
        return {p.key: p.default for p in self.parameters}

    def resolve(self, params: Optional[Params] = None) -> Dict[str, float]:
        """Fill in defaults and clamp every value into its declared range."""
        params = params or {}
        resolved = {}
        for p in self.parameters:
            value = float(params.get(p.key, p.default))
            if not p.contains(value):
                clamped = p.clamp(value)
                logger.warning("%s=%s outside [%s, %s], clamped to %s",
                               p.key, fmt(value), fmt(p.minimum), fmt(p.maximum), fmt(clamped))
                value = clamped
            resolved[p.key] = value
        return resolved

    def is_selectable(self, num_classes: int) -> bool:
        return not self.requires_binary_output or num_classes == 2

    def formula(self, num_classes: int, params: Optional[Params] = None) -> str:
        return self.formula_fn(num_classes, self.resolve(params))

    def gradient(self, num_classes: int, params: Optional[Params] = None) -> str:
        return self.gradient_fn(num_classes, self.resolve(params))

    def explanation(self, num_classes: int, params: Optional[Params] = None) -> str:
        return self.explanation_fn(num_classes, self.resolve(params))

    def gradient_note(self, num_classes: int, params: Optional[Params] = None) -> str:
        return self.gradient_note_fn(num_classes, self.resolve(params))

    def derivation(self, num_classes: int, params: Optional[Params] = None) -> List[Tuple[str, str]]:
        resolved = self.resolve(params)
        return [(s.heading, s.body(num_classes, resolved)) for s in self.derivation_sections]


# =============================================================================
# Formula templates
# =============================================================================

def _ce_formula(K: int, p: Params) -> str:
    return rf"\mathcal{{L}}(\hat{{y}}, y) = -\sum_{{i=1}}^{{{K}}} y_i \log \hat{{y}}_i"


def _ce_gradient(K: int, p: Params) -> str:
    return r"\frac{\partial \mathcal{L}}{\partial z^{(L)}_i} = \hat{y}_i - y_i"


def _bce_formula(K: int, p: Params) -> str:
    return r"\mathcal{L}(\hat{y}, y) = -y\log\hat{y} - (1-y)\log(1-\hat{y})"


def _bce_gradient(K: int, p: Params) -> str:
    return r"\frac{\partial \mathcal{L}}{\partial z} = \hat{y} - y"


def _focal_formula(K: int, p: Params) -> str:
    gamma = fmt(p["gamma"])
    return (
        rf"\mathcal{{L}} = -\sum_{{i=1}}^{{{K}}} y_i\,(1-\hat{{y}}_i)^{{{gamma}}}\log \hat{{y}}_i"
    )


def _focal_gradient(K: int, p: Params) -> str:
    """
    Both terms of d/dz_i of -(1 - p_t)^γ log p_t with p_t = ŷ_{y*}:
    the modulation-scaled residual and the log-weighted correction.
    """
    gamma = fmt(p["gamma"])
    lowered = fmt(max(0.0, p["gamma"] - 1))
    return (
        r"\frac{\partial \mathcal{L}}{\partial z_i} = "
        rf"(1-\hat{{y}}_{{y^*}})^{{{gamma}}}(\hat{{y}}_i - y_i)"
        rf" - {gamma}(1-\hat{{y}}_{{y^*}})^{{{lowered}}}"
        r"\log(\hat{y}_{y^*})\hat{y}_{y^*}(\delta_{i,y^*} - \hat{y}_i)"
    )


def _ls_formula(K: int, p: Params) -> str:
    eps = fmt(p["eps"])
    return (
        rf"\tilde{{y}}_i = (1-{eps})y_i + \tfrac{{{eps}}}{{{K}}},\quad "
        rf"\mathcal{{L}} = -\sum_{{i=1}}^{{{K}}} \tilde{{y}}_i \log \hat{{y}}_i"
    )


def _ls_gradient(K: int, p: Params) -> str:
    return r"\frac{\partial \mathcal{L}}{\partial z^{(L)}_i} = \hat{y}_i - \tilde{y}_i"


def smoothed_targets(num_classes: int, eps: float) -> Tuple[float, float]:
    """(wrong-class, correct-class) targets under label smoothing."""
    wrong = eps / num_classes
    return wrong, 1 - eps + wrong


def _ls_explanation(K: int, p: Params) -> str:
    wrong, correct = smoothed_targets(K, p["eps"])
    return (
        rf"$\varepsilon = {fmt(p['eps'])}$. Wrong-class target: ${wrong:.4f}$. "
        rf"Correct-class target: ${correct:.4f}$."
    )


# =============================================================================
# Registry
# =============================================================================

CROSS_ENTROPY = LossDescriptor(
    id="ce",
    label="Cross-Entropy",
    tag="Standard multiclass",
    best_for="Balanced multiclass",
    color="#34d399",
    requires_binary_output=False,
    formula_fn=_ce_formula,
    gradient_fn=_ce_gradient,
    explanation_fn=lambda K, p: (
        rf"$y$ is a one-hot vector in $\mathbb{{R}}^{{{K}}}$. "
        "Only the term for the correct class survives the sum."
    ),
    gradient_note_fn=lambda K, p: (
        "Clean residual: all exponentials cancel. This is why softmax + CE is the "
        "standard choice."
    ),
    derivation_sections=(
        DerivationSection(
            "Maximum-likelihood view",
            lambda K, p: (
                "Assume the true class is drawn from a categorical distribution "
                "parameterised by the network output. The log-likelihood of the true label "
                r"$y$ is $\log \hat{y}_{y^*}$, so minimising the negative log-likelihood is "
                "minimising the cross-entropy."
            ),
        ),
        DerivationSection(
            "Information-theoretic view",
            lambda K, p: (
                r"Cross-entropy $H(p,q) = -\sum_x p(x)\log q(x)$ measures the expected bits "
                r"needed to encode events from $p$ with a code optimised for $q$. Minimising "
                r"it pushes the model distribution $q = \hat{y}$ towards the data "
                r"distribution $p = y$."
            ),
        ),
        DerivationSection(
            "Why softmax + CE?",
            lambda K, p: (
                r"The gradient of CE with respect to the pre-softmax logits $z$ simplifies "
                r"to $\hat{y}_i - y_i$. No exponentials remain: the training signal is the "
                "residual between predicted and true probability."
            ),
        ),
    ),
)

BINARY_CROSS_ENTROPY = LossDescriptor(
    id="bce",
    label="Binary CE",
    tag="Binary (K = 2)",
    best_for="Binary (K=2)",
    color="#38bdf8",
    requires_binary_output=True,
    formula_fn=_bce_formula,
    gradient_fn=_bce_gradient,
    explanation_fn=lambda K, p: (
        "Use when $K = 2$. Replace the softmax head with a single sigmoid neuron."
    ),
    gradient_note_fn=lambda K, p: (
        "Same residual form as multiclass CE, now with a single sigmoid output."
    ),
    derivation_sections=(
        DerivationSection(
            "Bernoulli log-likelihood",
            lambda K, p: (
                r"A single sigmoid neuron $\hat{y} \in (0,1)$ represents $P(y=1 \mid x)$. "
                r"The Bernoulli likelihood is $\hat{y}^{\,y}(1-\hat{y})^{1-y}$; its negative "
                "log is the BCE formula, the $K=2$ special case of cross-entropy."
            ),
        ),
        DerivationSection(
            "Relationship to multiclass CE",
            lambda K, p: (
                "BCE with one sigmoid output is equivalent to CE with a 2-neuron softmax. "
                "The sigmoid is cheaper and its gradient keeps the residual form "
                r"$\hat{y} - y$."
            ),
        ),
    ),
)

FOCAL = LossDescriptor(
    id="focal",
    label="Focal Loss",
    tag="Class imbalance",
    best_for="Imbalanced datasets",
    color="#f472b6",
    requires_binary_output=False,
    parameters=(
        LossParameter("gamma", "γ (focusing)", minimum=0.0, maximum=5.0, step=0.5, default=2.0),
    ),
    formula_fn=_focal_formula,
    gradient_fn=_focal_gradient,
    explanation_fn=lambda K, p: (
        rf"$\gamma = {fmt(p['gamma'])}$. When $\gamma > 0$, easy examples "
        r"($\hat{y}$ close to 1) contribute very little loss."
    ),
    gradient_note_fn=lambda K, p: (
        "The modulating factor suppresses gradient magnitude for well-classified (easy) "
        "examples."
    ),
    derivation_sections=(
        DerivationSection(
            "Motivation: easy negatives dominate",
            lambda K, p: (
                "In heavily imbalanced datasets, correctly classified background examples "
                "dominate the gradient and drown the signal from rare positives. The "
                r"modulating factor $(1-\hat{y})^\gamma$ scales down well-classified "
                "examples so training focuses on hard ones."
            ),
        ),
        DerivationSection(
            "Effect of γ",
            lambda K, p: (
                r"$\gamma = 0$ recovers standard CE. As $\gamma$ grows, hard examples get "
                r"relatively more weight; $\gamma = 2$ is the usual recommendation "
                rf"(Lin et al., 2017). At the current $\gamma = {fmt(p['gamma'])}$ a "
                r"correct prediction with $\hat{y} = 0.9$ is scaled by "
                rf"$(0.1)^{{{fmt(p['gamma'])}}} = {0.1 ** p['gamma']:.4g}$ relative to CE."
            ),
        ),
    ),
)

LABEL_SMOOTHING = LossDescriptor(
    id="ls",
    label="Label Smoothing",
    tag="Regularisation",
    best_for="Noisy / overfit-prone",
    color="#a78bfa",
    requires_binary_output=False,
    parameters=(
        LossParameter("eps", "ε (smoothing)", minimum=0.01, maximum=0.3, step=0.01, default=0.1),
    ),
    formula_fn=_ls_formula,
    gradient_fn=_ls_gradient,
    explanation_fn=_ls_explanation,
    gradient_note_fn=lambda K, p: (
        r"Same residual form, but the smoothed target $\tilde{y}$ puts a floor under the "
        "wrong classes and keeps logits from growing without bound."
    ),
    derivation_sections=(
        DerivationSection(
            "The overconfidence problem",
            lambda K, p: (
                r"Standard CE pushes the correct-class logit towards $+\infty$ "
                r"($\hat{y} \to 1$, all others $\to 0$). This hurts calibration and can "
                "generalise poorly because the model becomes arbitrarily confident."
            ),
        ),
        DerivationSection(
            "Smoothing as a prior",
            lambda K, p: (
                rf"Label smoothing spreads a mass $\varepsilon$ uniformly across all "
                rf"${K}$ classes. The correct-class target becomes "
                r"$1 - \varepsilon + \varepsilon/K$ and wrong classes get "
                r"$\varepsilon/K$. This is equivalent to adding "
                r"$\mathrm{KL}(\mathrm{Uniform}\,\|\,\hat{y})$ to the loss, a calibration "
                "regulariser."
            ),
        ),
        DerivationSection(
            "Effect on gradients",
            lambda K, p: (
                r"The gradient is $\hat{y}_i - \tilde{y}_i$. Because $\tilde{y}$ never "
                "reaches 0 or 1 the network cannot become arbitrarily certain, which "
                "improves held-out calibration."
            ),
        ),
    ),
)

LOSSES: Dict[str, LossDescriptor] = {
    d.id: d for d in (CROSS_ENTROPY, BINARY_CROSS_ENTROPY, FOCAL, LABEL_SMOOTHING)
}

DEFAULT_LOSS = CROSS_ENTROPY.id


def get_loss(loss_id: str) -> LossDescriptor:
    try:
        return LOSSES[loss_id]
    except KeyError:
        raise InvalidOperation(f"Unknown loss {loss_id!r}") from None


def comparison_rows() -> List[Dict[str, str]]:
    return [
        {
            "Loss": d.label,
            "Best for": d.best_for,
            "Params": ", ".join(p.label for p in d.parameters) or "none",
        }
        for d in LOSSES.values()
    ]


# =============================================================================
# Selection state machine
# =============================================================================

@dataclass
class LossSelection:
    """Active loss id plus current hyperparameter values for every loss."""
    active_id: str = DEFAULT_LOSS
    params: Dict[str, float] = field(default_factory=lambda: {
        key: value for d in LOSSES.values() for key, value in d.defaults().items()
    })

    @property
    def active(self) -> LossDescriptor:
        return LOSSES[self.active_id]

    def select(self, loss_id: str, num_classes: int) -> bool:
        """Switch to ``loss_id``; rejected (returns False) when K does not fit."""
        descriptor = get_loss(loss_id)
        if not descriptor.is_selectable(num_classes):
            logger.debug("%s requires K=2, rejected at K=%d", descriptor.label, num_classes)
            return False
        self.active_id = loss_id
        return True

    def architecture_changed(self, num_classes: int) -> bool:
        """Re-validate after the output width changed; returns True if reverted."""
        if self.active.is_selectable(num_classes):
            return False
        logger.info("%s requires K=2 but K=%d, reverting to %s",
                    self.active.label, num_classes, LOSSES[DEFAULT_LOSS].label)
        self.active_id = DEFAULT_LOSS
        return True

    def set_parameter(self, key: str, value: float) -> None:
        owner = next((d for d in LOSSES.values() if any(p.key == key for p in d.parameters)), None)
        if owner is None:
            raise InvalidOperation(f"Unknown loss parameter {key!r}")
        declared = owner.parameter(key)
        if not declared.contains(value):
            raise OutOfRange(
                f"{key}={fmt(value)} outside [{fmt(declared.minimum)}, {fmt(declared.maximum)}]"
            )
        self.params[key] = float(value)

    def options(self, num_classes: int) -> List[Dict[str, object]]:
        return [
            {"id": d.id, "label": d.label, "tag": d.tag, "selectable": d.is_selectable(num_classes)}
            for d in LOSSES.values()
        ]

'''
Custom exception classes for bssvol.

This module defines the exception hierarchy used throughout the package. Each
exception carries a primary message, optional details and a context dictionary,
and appends the caller location to the rendered message so failures in long
estimation pipelines can be traced back to the stage that raised them.

The hierarchy separates configuration mistakes (unsupported method/kernel
combinations), invalid inputs (paths, sampling rates, powers, confidence levels)
and failures of the estimation collaborators (fits that do not produce a usable
scale factor).
'''

from typing import Any, Dict, List, Optional, Tuple, Union
import inspect
import numpy as np
from pathlib import Path


# Stages reported by EstimationError
STAGE_FITTING = "scale-factor fitting"
STAGE_FORMULA = "formula evaluation"
STAGE_ACCUMULATION = "accumulation"


class BSSError(Exception):
    """Base exception class for all bssvol errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the BSSError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        frame = inspect.currentframe()
        if frame:
            try:
                # Walk out of the exception constructors to the raising frame
                frame = frame.f_back
                while frame and frame.f_code.co_name == "__init__" and \
                        isinstance(frame.f_locals.get("self"), BSSError):
                    frame = frame.f_back
                if frame and frame.f_code.co_name.startswith("raise_"):
                    frame = frame.f_back
                if frame:
                    caller_info = inspect.getframeinfo(frame)
                    full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
            finally:
                del frame

        super().__init__(full_message)


class ParameterError(BSSError):
    """Exception raised for invalid scalar parameters.

    Used for sampling rates, powers, confidence levels and kernel parameters
    that fall outside their admissible domain.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class DataError(BSSError):
    """Exception raised for errors related to the observed path.

    Attributes:
        data_name: The name of the data that caused the error
        issue: Description of the issue with the data
        index: The index or location where the issue was detected
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Tuple[int, ...], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue
        self.index = index

        context_dict = context or {}
        if data_name:
            context_dict["Data"] = data_name
        if issue:
            context_dict["Issue"] = issue
        if index is not None:
            context_dict["Index"] = index

        super().__init__(message, details, context_dict)


class ConfigurationError(BSSError):
    """Exception raised for invalid configuration.

    Covers unknown method or kernel selectors, unsupported (method, kernel)
    combinations and invalid configuration-manager sections or options.

    Attributes:
        setting: The setting that caused the error
        value: The invalid setting value
        valid_options: Options that would have been accepted
        issue: Description of the issue with the configuration
    """

    def __init__(self,
                 message: str,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 valid_options: Optional[List[Any]] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.setting = setting
        self.value = value
        self.valid_options = valid_options
        self.issue = issue

        context_dict = context or {}
        if setting:
            context_dict["Setting"] = setting
        if value is not None:
            context_dict["Value"] = value
        if valid_options:
            context_dict["Valid Options"] = valid_options
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class EstimationError(BSSError):
    """Exception raised when an estimation collaborator fails.

    The ``stage`` attribute names which part of the pipeline failed:
    scale-factor fitting, formula evaluation or downstream accumulation.

    Attributes:
        stage: Pipeline stage that failed
        estimator: Name of the collaborator that failed
        issue: Description of the failure
    """

    def __init__(self,
                 message: str,
                 stage: Optional[str] = None,
                 estimator: Optional[str] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.stage = stage
        self.estimator = estimator
        self.issue = issue

        context_dict = context or {}
        if stage:
            context_dict["Stage"] = stage
        if estimator:
            context_dict["Estimator"] = estimator
        if issue:
            context_dict["Issue"] = issue

        if stage:
            message = f"[{stage}] {message}"

        super().__init__(message, details, context_dict)


class NumericError(BSSError):
    """Exception raised for numerical computation errors.

    Attributes:
        operation: The operation that caused the error
        values: The values that caused the error
        error_type: The type of numerical error (e.g., "overflow", "non-finite")
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 values: Optional[Any] = None,
                 error_type: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.values = values
        self.error_type = error_type

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if values is not None:
            if isinstance(values, np.ndarray) and values.size > 10:
                context_dict["Values"] = f"Array with shape {values.shape}"
            else:
                context_dict["Values"] = values
        if error_type:
            context_dict["Error Type"] = error_type

        super().__init__(message, details, context_dict)


class BSSWarning(Warning):
    """Base warning class for bssvol warnings.

    Attributes:
        message: The warning message
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        super().__init__(full_message)


class ConvergenceWarning(BSSWarning):
    """Warning issued when an optimizer reports non-convergence.

    Attributes:
        iterations: The number of iterations performed
        final_value: The final objective function value
    """

    def __init__(self,
                 message: str,
                 iterations: Optional[int] = None,
                 final_value: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.iterations = iterations
        self.final_value = final_value

        context_dict = context or {}
        if iterations is not None:
            context_dict["Iterations"] = iterations
        if final_value is not None:
            context_dict["Final Value"] = final_value

        super().__init__(message, details, context_dict)


class NumericWarning(BSSWarning):
    """Warning issued for potential numerical issues.

    Attributes:
        operation: The operation where the issue was detected
        value: The value that may cause numerical issues
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.value = value

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


# Helper functions for raising exceptions with consistent formatting

def raise_parameter_error(message: str,
                         param_name: Optional[str] = None,
                         param_value: Optional[Any] = None,
                         constraint: Optional[str] = None,
                         details: Optional[str] = None,
                         context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a ParameterError with consistent formatting.

    Raises:
        ParameterError: The formatted parameter error
    """
    raise ParameterError(message, param_name, param_value, constraint, details, context)


def raise_data_error(message: str,
                    data_name: Optional[str] = None,
                    issue: Optional[str] = None,
                    index: Optional[Union[int, Tuple[int, ...], str]] = None,
                    details: Optional[str] = None,
                    context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DataError with consistent formatting.

    Raises:
        DataError: The formatted data error
    """
    raise DataError(message, data_name, issue, index, details, context)


def raise_estimation_error(message: str,
                          stage: Optional[str] = None,
                          estimator: Optional[str] = None,
                          issue: Optional[str] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise an EstimationError with consistent formatting.

    Raises:
        EstimationError: The formatted estimation error
    """
    raise EstimationError(message, stage, estimator, issue, details, context)


def warn_convergence(message: str,
                    iterations: Optional[int] = None,
                    final_value: Optional[float] = None,
                    details: Optional[str] = None,
                    context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a ConvergenceWarning with consistent formatting."""
    import warnings
    warnings.warn(
        ConvergenceWarning(message, iterations, final_value, details, context),
        stacklevel=2
    )


def warn_numeric(message: str,
                operation: Optional[str] = None,
                value: Optional[Any] = None,
                details: Optional[str] = None,
                context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericWarning with consistent formatting."""
    import warnings
    warnings.warn(
        NumericWarning(message, operation, value, details, context),
        stacklevel=2
    )

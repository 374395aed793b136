"""Solidity compilation for ethnode-deployments library."""

import logging
from typing import Dict, Optional

import solcx
from solcx.exceptions import SolcError, SolcNotInstalled

from .exceptions import CompileError, ContractNotFoundError
from .types import CompiledContract

_LOGGER = logging.getLogger(__name__)


class SolcCompiler:
    """Compiles Solidity source text with py-solc-x."""

    def __init__(self, solc_version: Optional[str] = None):
        self.solc_version = solc_version

    def compile(self, source_text: str) -> Dict[str, CompiledContract]:
        """
        Compile Solidity source into deployable artifacts.

        Args:
            source_text: Solidity source code

        Returns:
            Mapping of contract name -> CompiledContract, in compiler output order.
            Interfaces and abstract contracts (empty bytecode) are left out.

        Raises:
            CompileError: If compilation fails or yields nothing deployable
        """
        try:
            output = solcx.compile_source(
                source_text,
                output_values=["abi", "bin"],
                solc_version=self.solc_version,
            )
        except (SolcError, SolcNotInstalled) as e:
            raise CompileError(f"Compilation failed: {e}") from e

        artifacts: Dict[str, CompiledContract] = {}
        for contract_id, data in output.items():
            # contract_id format: "<stdin>:ContractName"
            name = contract_id.split(":")[-1]
            bytecode = data.get("bin") or ""
            if not bytecode:
                continue
            artifacts[name] = CompiledContract(
                name=name,
                bytecode=bytes.fromhex(bytecode.removeprefix("0x")),
                abi=data.get("abi", []),
            )

        if not artifacts:
            raise CompileError("Source contains no deployable contract")

        _LOGGER.debug("Compiled %s", ", ".join(artifacts))
        return artifacts


def select_contract(
    artifacts: Dict[str, CompiledContract], name: Optional[str] = None
) -> CompiledContract:
    """
    Pick one artifact from a compilation result.

    Args:
        artifacts: Output of SolcCompiler.compile()
        name: Contract name; defaults to the last contract in the source

    Raises:
        ContractNotFoundError: If the named contract was not compiled
    """
    if name is None:
        if not artifacts:
            raise ContractNotFoundError("No compiled contracts to choose from")
        return list(artifacts.values())[-1]

    if name not in artifacts:
        raise ContractNotFoundError(
            f"Contract '{name}' not found; compiled: {sorted(artifacts)}"
        )
    return artifacts[name]

"""Rig binding that streams the retargeted pose over the VMC protocol.

Values are written into the in-memory rig during a tick and sent as OSC
messages by ``flush``, so any VMC-capable renderer can display the avatar.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
from pythonosc import udp_client

from errors import RigBindingAbsent
from rig import BONE_NAMES, EXPRESSION_NAMES, HumanoidRig

logger = logging.getLogger(__name__)

VMC_BONES = {
    "head": "Head",
    "chest": "Chest",
    "leftUpperArm": "LeftUpperArm",
    "rightUpperArm": "RightUpperArm",
    "leftLowerArm": "LeftLowerArm",
    "rightLowerArm": "RightLowerArm",
    "leftHand": "LeftHand",
    "rightHand": "RightHand",
}

VMC_BLENDS = {
    "blink": "Blink",
    "blinkLeft": "Blink_L",
    "blinkRight": "Blink_R",
    "aa": "A",
    "happy": "Joy",
    "surprised": "Surprised",
    "angry": "Angry",
}


def euler_to_quaternion(pitch: float, yaw: float, roll: float) -> List[float]:
    cp, sp = np.cos(pitch / 2), np.sin(pitch / 2)
    cy, sy = np.cos(yaw / 2), np.sin(yaw / 2)
    cr, sr = np.cos(roll / 2), np.sin(roll / 2)
    qx = sp * cy * cr - cp * sy * sr
    qy = cp * sy * cr + sp * cy * sr
    qz = cp * cy * sr - sp * sy * cr
    qw = cp * cy * cr + sp * sy * sr
    return [float(qx), float(qy), float(qz), float(qw)]


class VmcRig(HumanoidRig):
    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 39539,
        bones: Sequence[str] = BONE_NAMES,
        expressions: Sequence[str] = EXPRESSION_NAMES,
        client: Optional[udp_client.SimpleUDPClient] = None,
    ):
        for name in bones:
            if name not in VMC_BONES:
                raise RigBindingAbsent(f"No VMC bone for {name}")
        for name in expressions:
            if name not in VMC_BLENDS:
                raise RigBindingAbsent(f"No VMC blend shape for {name}")
        super().__init__(bones, expressions)
        self._client = client or udp_client.SimpleUDPClient(host, port)
        logger.info("Streaming VMC to %s:%s", host, port)

    def flush(self) -> None:
        root = self.root
        root_q = euler_to_quaternion(0.0, root.rotation_y, 0.0)
        self._client.send_message(
            "/VMC/Ext/Root/Pos",
            ["root", *root.position, *root_q, root.scale, root.scale, root.scale, 0.0, 0.0, 0.0],
        )
        for name, bone in self.bones.items():
            q = euler_to_quaternion(bone.rotation.x, bone.rotation.y, bone.rotation.z)
            self._client.send_message("/VMC/Ext/Bone/Pos", [VMC_BONES[name], 0.0, 0.0, 0.0, *q])
        for name, weight in self.expressions.items():
            self._client.send_message("/VMC/Ext/Blend/Val", [VMC_BLENDS[name], float(weight)])
        self._client.send_message("/VMC/Ext/Blend/Apply", [])
        x, y = self.look_target
        self._client.send_message("/VMC/Ext/Set/Eye", [1, float(x), float(y), 1.0])

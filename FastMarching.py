# -*- coding: UTF-8 -*-
from enum import IntEnum

import numpy as np

from Grid import GridHex
from Heap import Heap
from constants import logger,EPS,MAXDIST,OUTOFBOUNDS

__all__=['NodeStatus','transition','NoInterfaceError','FastMarchingMethod']

class NodeStatus(IntEnum):
    """
    NONE   : also know as Far, not reached by the front yet
    FROZEN : also know as Accepted, on the interface or already computed, never changed again
    TRIAL  : also know as Narrow Band, adjacent to a frozen node and queued in the heap
    MASKED : excluded from the march, neither read nor written
    """
    NONE=0
    FROZEN=1
    TRIAL=2
    MASKED=3

TRANSITIONS={
    NodeStatus.NONE:(NodeStatus.TRIAL,NodeStatus.FROZEN),
    NodeStatus.TRIAL:(NodeStatus.FROZEN,),
    NodeStatus.FROZEN:(),
    NodeStatus.MASKED:(),
}

def transition(old,new):
    """
    return `new` if a node may go from status `old` to status `new`

    >>> transition(NodeStatus.NONE,NodeStatus.TRIAL)
    <NodeStatus.TRIAL: 2>
    """
    old,new=NodeStatus(int(old)),NodeStatus(int(new))
    if new not in TRANSITIONS[old]:
        raise ValueError('invalid node status transition %s -> %s'%(old.name,new.name))
    return new

class NoInterfaceError(ValueError):
    """
    the signed distance has no sign change, there is no front to march from
    """

class FastMarchingMethod:
    """
    1. Sethian J A. Fast marching methods[J]. SIAM review, 1999, 41(2): 199-235.
    2. Adalsteinsson D , Sethian J A . The Fast Construction of Extension Velocities in Level Set Methods[J]. Journal of Computational Physics, 1999, 148(1):2-22.
    3. Bærentzen J A. On the implementation of fast marching methods for 3D lattices[J]. 2001.
    4. Chopp D L. Some improvements of the fast marching method[J]. SIAM Journal on Scientific Computing, 2001, 23(1): 230-244.

    Fast Marching Method
        approximate solution of the Eikonal equation
            F(x) |grad T(x)| = 1
        on a `GridHex`, in a single causally ordered sweep.

    Reinitialization
        `march(signedDistance)` turns the level set into a signed distance
        function, the nodes next to the zero contour keep their value.

    Velocity Extension
        `march(signedDistance,velocity)` also solves
            grad(f) . grad(T) = 0
        so that `velocity` known on the interface nodes is constant along the
        normals of the front (Ref.2).

    Both arrays are node indexed and modified in place, the caller must not
    touch them while `march` runs.

    >>> grid=GridHex(np.linspace(-1,1,51),np.linspace(-1,1,51))
    >>> phi=grid.flatten(grid.X**2+grid.Y**2-0.25)
    >>> FastMarchingMethod(grid).march(phi)
    """
    def __init__(self,grid:GridHex,isTest=False,freezeMasked=False):
        self.logger=logger

        self.grid=grid
        # validate the heap after each update
        self.isTest=isTest
        # freeze the nodes next to a masked node as well
        self.freezeMasked=freezeMasked

        n=grid.nNodes
        self.heap=Heap(n,isTest=isTest)
        self.nodeStatus=np.full(n,NodeStatus.NONE,dtype=np.int8)
        self.isSeed=np.zeros(n,dtype=bool)
        # unsigned distance used during the march
        self.distance=np.full(n,MAXDIST)

        self.isVelocity=False
        self.signedDistanceCopy=None
        self.velocityCopy=None
        self.velocity=None
        self.speed=1.0
        self.bandWidth=None

        self.frozenOrder=[]
        self.nFallback=0

    def march(self,signedDistance,velocity=None,speed=None,bandWidth=None):
        """
        reinitialize `signedDistance` (and extend `velocity` if given) in place

        speed     : scalar or node indexed array of the front speed F, default 1
        bandWidth : stop the march once the front is farther than `bandWidth`
        """
        n=self.grid.nNodes
        if len(signedDistance)!=n:
            raise ValueError('signed distance has %d values for %d nodes'%(len(signedDistance),n))
        if velocity is not None and len(velocity)!=n:
            raise ValueError('velocity has %d values for %d nodes'%(len(velocity),n))
        self.speed=self.checkSpeed(speed)
        self.bandWidth=bandWidth

        self.signedDistanceCopy=np.array(signedDistance,dtype=float)
        self.isVelocity=velocity is not None
        if self.isVelocity:
            self.velocityCopy=np.array(velocity,dtype=float)
            self.velocity=self.velocityCopy.copy()
        else:
            self.velocityCopy,self.velocity=None,None

        self.reset()
        self.initialiseFrozen()
        nSeed=int(np.count_nonzero(self.isSeed))
        if nSeed==0:
            self.logger.error('march: no sign change in the signed distance of %d nodes'%n)
            raise NoInterfaceError('no interface found, the signed distance has no sign change')

        self.initialiseHeap()
        self.initialiseTrial()
        self.solve()

        sign=np.where(self.signedDistanceCopy<0,-1.0,1.0)
        frozen=self.nodeStatus==NodeStatus.FROZEN
        masked=self.nodeStatus==NodeStatus.MASKED
        result=np.where(frozen,sign*self.distance,sign*MAXDIST)
        result=np.where(self.isSeed|masked,self.signedDistanceCopy,result)
        signedDistance[:]=result
        if self.isVelocity:
            velocity[:]=self.velocity

        self.logger.info('march: %d/%d nodes frozen from %d seeds, %d quadratic fallbacks'%(
            np.count_nonzero(frozen),n,nSeed,self.nFallback))

    def checkSpeed(self,speed):
        if speed is None:
            return 1.0
        if np.isscalar(speed):
            if speed<=0:
                raise ValueError('speed must be positive, got %g'%speed)
            return float(speed)
        speed=np.asarray(speed,dtype=float)
        if speed.shape!=(self.grid.nNodes,):
            raise ValueError('speed has shape %s for %d nodes'%(repr(speed.shape),self.grid.nNodes))
        if np.any(speed<=0):
            raise ValueError('speed must be positive')
        return speed

    def speedAt(self,node):
        return self.speed if np.isscalar(self.speed) else self.speed[node]

    def reset(self):
        self.nodeStatus[:]=np.where(self.grid.masked,NodeStatus.MASKED,NodeStatus.NONE)
        self.isSeed[:]=False
        self.distance[:]=MAXDIST
        self.heap.clear()
        self.frozenOrder=[]
        self.nFallback=0

    def setStatus(self,node,status):
        self.nodeStatus[node]=transition(self.nodeStatus[node],status)

    def initialiseFrozen(self):
        """
        freeze the nodes crossed by, or adjacent to, the zero contour,
        they keep their original value
        """
        grid=self.grid
        phi=self.signedDistanceCopy
        for node in range(grid.nNodes):
            if self.nodeStatus[node]==NodeStatus.MASKED or not np.isfinite(phi[node]):
                continue
            frozen=grid.isSignChange(node,phi)
            if not frozen and self.freezeMasked:
                frozen=any(neib!=OUTOFBOUNDS and grid.masked[neib] for neib in grid.neighbours(node))
            if frozen:
                self.setStatus(node,NodeStatus.FROZEN)
                self.isSeed[node]=True
                self.distance[node]=abs(phi[node])
        self.logger.debug('initialiseFrozen: %d seeds'%np.count_nonzero(self.isSeed))

    def initialiseHeap(self):
        self.heap.clear()

    def initialiseTrial(self):
        """
        every non frozen neighbour of a seed gets a first estimate and is queued
        """
        for node in np.flatnonzero(self.isSeed):
            for neib in self.grid.neighbours(node):
                if neib==OUTOFBOUNDS or self.nodeStatus[neib]!=NodeStatus.NONE:
                    continue
                self.updateTrial(neib)
        self.logger.debug('initialiseTrial: %d trial nodes'%len(self.heap))

    def solve(self):
        """
        loop update procedure until the heap is empty or the front passes `bandWidth`
        """
        heap=self.heap
        while not heap.empty():
            node,t=heap.pop()
            if self.bandWidth is not None and t>self.bandWidth:
                self.logger.debug('solve: stop at t=%f beyond band %f'%(t,self.bandWidth))
                heap.clear()
                break
            self.setStatus(node,NodeStatus.FROZEN)
            self.frozenOrder.append(node)
            if self.isVelocity:
                self.finaliseVelocity(node)
            self.logger.debug('freeze: node=%d,coords=%s,t=%f'%(node,self.grid.coord(node),t))

            for neib in self.grid.neighbours(node):
                if neib==OUTOFBOUNDS:
                    continue
                if self.nodeStatus[neib] in (NodeStatus.NONE,NodeStatus.TRIAL):
                    self.updateTrial(neib)

    def updateTrial(self,node):
        """
        recompute the tentative distance of a NONE or TRIAL node and queue it
        """
        t=self.updateNode(node)
        if t>=MAXDIST:
            return
        if self.nodeStatus[node]==NodeStatus.TRIAL:
            if t<self.distance[node]:
                self.distance[node]=t
                self.heap.decrease(node,t)
        else:
            self.setStatus(node,NodeStatus.TRIAL)
            self.distance[node]=t
            self.heap.push(node,t)

    def upwind(self,node):
        """
        for each axis the frozen neighbour with the smallest distance below the
        current distance of `node`, as a list of (distance,spacing,neighbour)
        """
        grid=self.grid
        current=self.distance[node]
        neibs=grid.neighbours(node)
        stencil=[]
        for axis in range(grid.ndim):
            best=None
            for side in (0,1):
                neib=neibs[2*axis+side]
                if neib==OUTOFBOUNDS or self.nodeStatus[neib]!=NodeStatus.FROZEN:
                    continue
                u=self.distance[neib]
                if u>=current:
                    continue
                if best is None or u<best[0]:
                    best=(u,grid.spacing(node,axis,side),neib)
            if best is not None:
                stencil.append(best)
        return stencil

    def updateNode(self,node):
        """
        tentative distance of `node` from its frozen neighbours, first order
        upwind discretization of F|grad T|=1
        Ref.1 Section 3, Ref.3 Appendix A
        """
        a,b,c=0.,0.,0.
        stencil=self.upwind(node)
        for u,h,_ in stencil:
            a=a+1/h**2
            b=b-2*u/h**2
            c=c+u**2/h**2
        F=self.speedAt(node)
        c=c-1/F**2
        return self.solveQuadratic(node,a,b,c,stencil,F)

    def solveQuadratic(self,node,a,b,c,stencil,F):
        """
        root of a*t^2+b*t+c=0 consistent with the upwind stencil
        """
        if len(stencil)==0:
            return MAXDIST
        if len(stencil)==1:
            u,h,_=stencil[0]
            return u+h/F

        det=b**2-4*a*c
        if det<-EPS*b**2:
            self.nFallback=self.nFallback+1
            self.logger.debug('node=%d,a=%f,b=%f,c=%f: negative discriminant'%(node,a,b,c))
            return self.godunov(stencil,F)

        # larger root, the front passed both upwind neighbours before
        t=(-b+np.sqrt(max(det,0.)))/(2*a)
        if t<max(u for u,_,_ in stencil)-EPS*abs(t):
            self.nFallback=self.nFallback+1
            self.logger.debug('node=%d,t=%f below an upwind neighbour'%(node,t))
            return self.godunov(stencil,F)
        return min(t,MAXDIST)

    @staticmethod
    def godunov(stencil,F):
        return min(u+h/F for u,h,_ in stencil)

    def finaliseVelocity(self,node):
        """
        velocity of a node which has just been frozen, weighted by the upwind
        differences of the distance so that grad(f).grad(T)=0
        Ref.2 Section 3
        """
        t=self.distance[node]
        stencil=self.upwind(node)
        if len(stencil)==0:
            return
        ws=[(t-u)/h**2 for u,h,_ in stencil]
        fs=[self.velocity[neib] for _,_,neib in stencil]
        w=sum(ws)
        if w<=0:
            self.velocity[node]=sum(fs)/len(fs)
        else:
            self.velocity[node]=sum(wi*fi for wi,fi in zip(ws,fs))/w
        self.logger.debug('velocity: node=%d,t=%f,f=%f'%(node,t,self.velocity[node]))
